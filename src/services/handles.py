# src/services/handles.py
import re
import secrets
import unicodedata


def handle_from_email(email: str) -> str:
    """Derive a profile handle from the local part of an email: lowercase ascii letters and digits."""
    local = email.split("@")[0]
    t = unicodedata.normalize("NFKD", local).encode("ascii", "ignore").decode("ascii")
    t = re.sub(r"[^a-z0-9]", "", t.lower())
    return t or "chef"


def unique_handle(base: str) -> str:
    """Append a short random suffix to avoid collisions."""
    return f"{base}{secrets.token_hex(2)}"  # e.g. maria3f9a
