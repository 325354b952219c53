import pytest
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from bookstore.core.config import Settings
from bookstore.core.errors import ForbiddenError
from bookstore.core.security import (
    build_token_verifier,
    hash_password,
    issue_token,
    verify_password,
)


@pytest.fixture
def settings():
    return Settings(JWT_SECRET="unit-secret", JWT_EXPIRES_MINUTES=30)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed) is True
        assert verify_password("wrong horse", hashed) is False

    def test_hashes_are_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_malformed_hash(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_issue_and_verify(self, settings):
        user_id = uuid.uuid4()
        now = datetime.now(timezone.utc)
        token = issue_token(settings, user_id, now=now)

        identity = build_token_verifier(settings)(token)
        assert identity.user_id == user_id
        expected = int((now + timedelta(minutes=30)).timestamp())
        assert int(identity.expires_at.timestamp()) == expected

    def test_expired_token(self, settings):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = issue_token(settings, uuid.uuid4(), now=issued)

        with pytest.raises(ForbiddenError, match="Token expired"):
            build_token_verifier(settings)(token)

    def test_wrong_secret(self, settings):
        token = issue_token(settings, uuid.uuid4())
        other = Settings(JWT_SECRET="another-secret")

        with pytest.raises(ForbiddenError, match="Invalid or expired token"):
            build_token_verifier(other)(token)

    def test_garbage_token(self, settings):
        with pytest.raises(ForbiddenError):
            build_token_verifier(settings)("not.a.token")

    def test_missing_subject(self, settings):
        exp = datetime.now(timezone.utc) + timedelta(minutes=5)
        token = jwt.encode({"exp": exp}, "unit-secret", algorithm="HS256")

        with pytest.raises(ForbiddenError):
            build_token_verifier(settings)(token)

    def test_subject_not_a_uuid(self, settings):
        exp = datetime.now(timezone.utc) + timedelta(minutes=5)
        token = jwt.encode({"sub": "42", "exp": exp}, "unit-secret", algorithm="HS256")

        with pytest.raises(ForbiddenError):
            build_token_verifier(settings)(token)

    def test_rejected_algorithm(self, settings):
        exp = datetime.now(timezone.utc) + timedelta(minutes=5)
        token = jwt.encode({"sub": str(uuid.uuid4()), "exp": exp}, "unit-secret", algorithm="HS512")

        with pytest.raises(ForbiddenError):
            build_token_verifier(settings)(token)
