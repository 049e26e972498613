"""SmsGuard: brute-force lockout for SMS verification codes."""

__version__ = "0.1.0"
