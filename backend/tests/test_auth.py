"""
Jam Session Backend — Bearer Token Tests
==========================================

What:  Tests for decode_token(): signature, expiry and required claims.
"""

import pytest

from conftest import make_token
from jamsession.auth import decode_token
from jamsession.exceptions import AuthenticationError


class TestDecodeToken:

    def test_valid_token(self):
        caller = decode_token(make_token("javier@example.com"))
        assert caller.email == "javier@example.com"
        assert caller.sub is None

    def test_subject_is_kept(self):
        caller = decode_token(make_token("javier@example.com", sub="auth0|123"))
        assert caller.sub == "auth0|123"

    def test_expired_token(self):
        with pytest.raises(AuthenticationError, match="Invalid or expired"):
            decode_token(make_token("javier@example.com", expires_in=-60))

    def test_wrong_secret(self):
        with pytest.raises(AuthenticationError):
            decode_token(make_token("javier@example.com", secret="someone-elses-secret"))

    def test_missing_email_claim(self):
        with pytest.raises(AuthenticationError, match="no email claim"):
            decode_token(make_token(""))

    def test_non_string_email_claim(self):
        with pytest.raises(AuthenticationError, match="must be a string"):
            decode_token(make_token(12345))
        with pytest.raises(AuthenticationError, match="must be a string"):
            decode_token(make_token(["javier@example.com"]))

    def test_garbage(self):
        with pytest.raises(AuthenticationError):
            decode_token("not-a-jwt")
