# productapi/auth.py
from typing import Optional

API_KEY_HEADER = "x-api-key"


def authorize(header_value: Optional[str], secret: str) -> bool:
    """
    True iff the x-api-key header is present and equals the shared secret.

    This is a static shared secret, not a credential system. The comparison
    is a plain case-sensitive equality check; clients depend on exactly that.
    """
    if not header_value:
        return False
    return header_value == secret
