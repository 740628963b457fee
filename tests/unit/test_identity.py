from __future__ import annotations

import jwt
import pytest

from dm_service.infrastructure.auth.claims import principal_from_claims
from dm_service.infrastructure.auth.hs256_verifier import HS256Verifier

SECRET = "unit-test-secret-0123456789abcdef0123"


def test_claims_prefer_full_name():
    p = principal_from_claims({"sub": "user_1", "email": "a@x.io", "name": "Ada", "picture": "http://p"})

    assert (p.user_id, p.email, p.name, p.avatar) == ("user_1", "a@x.io", "Ada", "http://p")
    assert p.principal_key == "user:user_1"


def test_claims_build_name_from_parts_or_default():
    assert principal_from_claims({"sub": "u", "given_name": "Ada", "family_name": "Lovelace"}).name == "Ada Lovelace"
    assert principal_from_claims({"sub": "u", "first_name": "Ada"}).name == "Ada"
    assert principal_from_claims({"sub": "u"}).name == "User"


def test_claims_without_subject_rejected():
    with pytest.raises(ValueError):
        principal_from_claims({"sub": "  "})


@pytest.mark.asyncio
async def test_hs256_verifier_round_trip():
    token = jwt.encode({"sub": "user_9", "email": "n@x.io"}, SECRET, algorithm="HS256")

    principal = await HS256Verifier(SECRET).verify(token)

    assert principal.user_id == "user_9"


@pytest.mark.asyncio
async def test_hs256_verifier_rejects_wrong_secret():
    token = jwt.encode({"sub": "user_9"}, SECRET, algorithm="HS256")

    with pytest.raises(jwt.InvalidTokenError):
        await HS256Verifier("another-secret-0123456789abcdef012345").verify(token)
