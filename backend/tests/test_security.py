from datetime import timedelta

import pytest
from jose import jwt

from app.core.config import settings
from app.core.errors import AuthFailure, AuthFailureKind
from app.core.security import Principal, authenticate, create_access_token


def test_round_trip_principal():
    token = create_access_token("ops@example.com", role="admin")

    assert authenticate(token) == Principal(subject="ops@example.com", role="admin")


@pytest.mark.parametrize("token", [None, ""])
def test_missing(token):
    with pytest.raises(AuthFailure) as exc:
        authenticate(token)
    assert exc.value.kind is AuthFailureKind.MISSING
    assert exc.value.status_code == 401


def test_expired():
    token = create_access_token("ops@example.com", expires_delta=timedelta(seconds=-1))

    with pytest.raises(AuthFailure) as exc:
        authenticate(token)
    assert exc.value.kind is AuthFailureKind.EXPIRED
    assert exc.value.message == "Token expired"


def test_wrong_signature():
    token = jwt.encode({"sub": "ops@example.com"}, "some-other-secret", algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(AuthFailure) as exc:
        authenticate(token)
    assert exc.value.kind is AuthFailureKind.INVALID


def test_token_without_subject_is_invalid():
    token = jwt.encode({"role": "admin"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(AuthFailure) as exc:
        authenticate(token)
    assert exc.value.kind is AuthFailureKind.INVALID


def test_token_without_role_has_empty_role():
    token = jwt.encode({"sub": "legacy"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    assert authenticate(token).role == ""
