from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Dict, List, Optional

from ..state import RenderedReport
from .provider import VerificationResult

INDENT = "    "


def _slot_names(cls: type) -> List[str]:
    names: List[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.extend(s for s in slots if s not in ("__dict__", "__weakref__") and s not in names)
    return names


def _fields(obj: Any) -> Optional[List[tuple[str, Any]]]:
    """Declared fields, or None when the object exposes neither __dict__ nor __slots__."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)]
    if hasattr(obj, "__dict__"):
        return sorted(vars(obj).items())
    slots = _slot_names(type(obj))
    if slots:
        return sorted((s, getattr(obj, s)) for s in slots if hasattr(obj, s))
    return None


def _is_record(value: Any) -> bool:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    if callable(value):
        return False
    return hasattr(value, "__dict__") or bool(_slot_names(type(value)))


def _render_value(value: Any, depth: int) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, bool) or value is None:
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        pad = INDENT * (depth + 1)
        items = "".join(f"{pad}{_render_value(v, depth + 1)},\n" for v in value)
        return f"[\n{items}{INDENT * depth}]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        pad = INDENT * (depth + 1)
        items = "".join(f"{pad}{k}: {_render_value(v, depth + 1)},\n" for k, v in sorted(value.items()))
        return f"{{\n{items}{INDENT * depth}}}"
    if _is_record(value):
        return render_text(value, depth)
    return repr(value) if isinstance(value, str) else str(value)


def render_text(report: Any, depth: int = 0) -> str:
    """Multi-line dump of every field of a report, stable for a given instance."""
    name = type(report).__name__
    fields = _fields(report)
    if fields is None:
        return repr(report)
    if not fields:
        return f"{name} {{}}"
    pad = INDENT * (depth + 1)
    lines = [f"{name} {{"]
    for key, value in fields:
        lines.append(f"{pad}{key}: {_render_value(value, depth + 1)},")
    lines.append(f"{INDENT * depth}}}")
    return "\n".join(lines)


def render_report(
    report: Any,
    message: str,
    verification: Optional[VerificationResult] = None,
) -> RenderedReport:
    """Derive the text and JSON views from one report instance."""
    status = "verified" if verification is not None and verification.verified else "generated"
    meta: Optional[Dict[str, Any]] = None
    if verification is not None:
        meta = {"verified": verification.verified, "detail": verification.detail}
    return RenderedReport(message=message, status=status, text=render_text(report), verification=meta)
