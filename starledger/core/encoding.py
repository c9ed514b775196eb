# starledger/core/encoding.py
import base64
import binascii

def b64url_encode(data: bytes) -> str:
    """Encode bytes to base64url (no padding, URL-safe)."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(s: str) -> bytes:
    """Decode base64url string back to bytes. Raises ValueError on garbage."""
    if not isinstance(s, str):
        raise ValueError(f"Expected base64url string, got {type(s).__name__}")
    # Restore padding
    padding = len(s) % 4
    if padding:
        s += "=" * (4 - padding)
    try:
        return base64.urlsafe_b64decode(s)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"Invalid base64url data: {e}") from e
