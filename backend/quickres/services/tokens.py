"""Token issuer for verification, reservation (scan) and magic-link tokens.

Tokens draw 256 bits from the OS CSPRNG. Uniqueness is ultimately enforced by
the store's unique constraints; callers regenerate on ``TokenCollision``.
"""
import secrets

TOKEN_BYTES = 32


def issue_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def issue_verification_token() -> str:
    return issue_token()


def issue_reservation_token() -> str:
    return issue_token()


def issue_reservation_tokens(count: int) -> list[str]:
    """Mint ``count`` distinct reservation tokens for one confirmation."""
    tokens: set[str] = set()
    while len(tokens) < count:
        tokens.add(issue_reservation_token())
    return list(tokens)


def redact(token: str) -> str:
    """Short prefix safe to put in logs."""
    return f"{token[:6]}…"
