"""Login return path: sanitize it and carry it through the OAuth state parameter."""
import base64
import binascii
import secrets
import string
from typing import Optional, Tuple

FALLBACK_PATH = "/"
NONCE_LENGTH = 16
_NONCE_ALPHABET = string.ascii_letters + string.digits


def generate_nonce(length: int = NONCE_LENGTH) -> str:
    return "".join(secrets.choice(_NONCE_ALPHABET) for _ in range(length))


def sanitize_return_path(path: Optional[str]) -> str:
    """Return ``path`` if it is a same-site absolute path, else FALLBACK_PATH.

    Rejects absolute URLs, protocol-relative paths (``//host``), backslashes
    (browsers treat ``/\\host`` like ``//host``) and control characters.
    """
    if not path or not path.startswith("/") or path.startswith("//"):
        return FALLBACK_PATH
    if "\\" in path or any(ord(c) < 0x20 or ord(c) == 0x7F for c in path):
        return FALLBACK_PATH
    if ":" in path.split("?", 1)[0].split("#", 1)[0]:
        return FALLBACK_PATH
    return path


def encode_state(nonce: str, return_path: str) -> str:
    """``<nonce>.<base64url(return_path)>``; the root path is left out."""
    if return_path == FALLBACK_PATH:
        return nonce
    encoded = base64.urlsafe_b64encode(return_path.encode("utf-8")).decode("ascii").rstrip("=")
    return f"{nonce}.{encoded}"


def decode_state(state: Optional[str]) -> Tuple[str, str]:
    """Split a state value into (nonce, sanitized return path)."""
    if not state:
        return "", FALLBACK_PATH
    nonce, _, encoded = state.partition(".")
    if not encoded:
        return nonce, FALLBACK_PATH
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        path = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return nonce, FALLBACK_PATH
    # Re-check: the state came back through the browser
    return nonce, sanitize_return_path(path)
