import hashlib

def sha256_hex(data: bytes | str) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()

def sha512(data: bytes) -> bytes:
    return hashlib.sha512(data).digest()

def key_id(key: bytes) -> str:
    # short non-reversible handle for log lines
    return sha256_hex(key)[:16]
