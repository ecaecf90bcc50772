"""Tests for the token issuer."""
from quickres.services import tokens


def test_tokens_are_url_safe_and_long():
    token = tokens.issue_verification_token()
    assert len(token) >= 43
    assert all(c.isalnum() or c in "-_" for c in token)


def test_verification_and_reservation_tokens_never_repeat():
    issued = [tokens.issue_verification_token() for _ in range(5000)]
    issued += [tokens.issue_reservation_token() for _ in range(5000)]
    issued += tokens.issue_reservation_tokens(5000)
    assert len(set(issued)) == len(issued) == 15000


def test_issue_reservation_tokens_returns_distinct_tokens():
    minted = tokens.issue_reservation_tokens(5)
    assert len(minted) == 5
    assert len(set(minted)) == 5


def test_redact_keeps_only_a_prefix():
    token = tokens.issue_token()
    redacted = tokens.redact(token)
    assert redacted.startswith(token[:6])
    assert token not in redacted
