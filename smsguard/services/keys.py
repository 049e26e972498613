"""
Redis key derivation for mismatch attempt sets.
"""

DEFAULT_KEY_PREFIX = "sms.verification.code.mismatch"


def _escape(part: str) -> str:
    return part.replace("\\", "\\\\").replace(".", "\\.")


def mismatch_key(mobile: str, scope: str, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    """One key per (mobile, scope) subject; separators inside either part are escaped."""
    return f"{prefix}.{_escape(mobile)}.{_escape(scope)}"
