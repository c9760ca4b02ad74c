"""
Invitation Token Issuer

Invitation tokens are bearer credentials, handled like password reset tokens:
cryptographically random, single purpose, never logged in full.
"""

import re
import secrets
from typing import Optional
from urllib.parse import urlencode

TOKEN_BYTES = 32

# token_urlsafe(32) yields 43 characters of the URL-safe base64 alphabet
_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{32,64}$")


def issue_token() -> str:
    """Generate a new unguessable invitation token"""
    return secrets.token_urlsafe(TOKEN_BYTES)


def is_well_formed(token: Optional[str]) -> bool:
    """Shape check applied before any lookup; malformed tokens never hit the store"""
    return bool(token) and _TOKEN_PATTERN.match(token) is not None


def mask(token: Optional[str]) -> str:
    """Loggable form of a token"""
    if not token:
        return "<none>"
    return f"{token[:8]}..."


def build_claim_link(base_url: str, signup_path: str, token: str) -> str:
    """Link the new hire follows to claim the invitation"""
    return f"{base_url.rstrip('/')}/{signup_path.lstrip('/')}?{urlencode({'token': token})}"
