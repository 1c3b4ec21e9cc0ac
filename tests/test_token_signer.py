# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""RS256 signing and verification."""

import base64
import json
from datetime import timedelta

import pytest

from smartnote_server.auth import TokenSigner, hash_password, verify_password
from smartnote_server.errors import TokenExpired, TokenInvalid
from smartnote_server.models.timestamp import utcnow
from smartnote_server.scripts.generate_keys import generate_key_pair


@pytest.fixture(scope="module")
def other_keys():
    private_pem, public_pem = generate_key_pair()
    return private_pem.decode(), public_pem.decode()


def _with_claims(token: str, **changes) -> str:
    header, payload, signature = token.split(".")
    padded = payload + "=" * (-len(payload) % 4)
    claims = json.loads(base64.urlsafe_b64decode(padded))
    claims.update(changes)
    new_payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()
    return f"{header}.{new_payload}.{signature}"


def test_issue_and_decode(signer):
    issued = signer.issue("42", "a@x.com")
    claims = signer.decode(issued.token)
    assert claims["sub"] == "42"
    assert claims["email"] == "a@x.com"
    assert claims["jti"] == issued.jti
    assert claims["exp"] - claims["iat"] == signer.expire_minutes * 60


def test_default_lifetime_is_24_hours(signer):
    assert signer.expire_minutes == 1440
    now = utcnow()
    issued = signer.issue("1", "a@x.com", now=now)
    assert issued.expires_at - now == timedelta(hours=24)


def test_header_uses_rs256(signer):
    header = signer.issue("1", "a@x.com").token.split(".")[0]
    decoded = json.loads(base64.urlsafe_b64decode(header + "=" * (-len(header) % 4)))
    assert decoded["alg"] == "RS256"


def test_expired(signer):
    issued = signer.issue("1", "a@x.com", now=utcnow() - timedelta(days=2))
    with pytest.raises(TokenExpired):
        signer.decode(issued.token)


def test_signed_with_other_key(signer, other_keys):
    private_pem, public_pem = other_keys
    forger = TokenSigner(private_pem, public_pem, issuer=signer.issuer, audience=signer.audience)
    token = forger.issue("1", "a@x.com").token
    with pytest.raises(TokenInvalid):
        signer.decode(token)


def test_tampered_claims(signer):
    token = signer.issue("1", "a@x.com").token
    with pytest.raises(TokenInvalid):
        signer.decode(_with_claims(token, sub="2"))


def test_expired_token_with_bad_signature_is_invalid(signer):
    token = signer.issue("1", "a@x.com", now=utcnow() - timedelta(days=2)).token
    with pytest.raises(TokenInvalid):
        signer.decode(_with_claims(token, sub="2"))


def test_wrong_audience(signer):
    other = TokenSigner(signer.private_key, signer.public_key, issuer=signer.issuer, audience="someone-else")
    with pytest.raises(TokenInvalid):
        signer.decode(other.issue("1", "a@x.com").token)


def test_wrong_issuer(signer):
    other = TokenSigner(signer.private_key, signer.public_key, issuer="elsewhere", audience=signer.audience)
    with pytest.raises(TokenInvalid):
        signer.decode(other.issue("1", "a@x.com").token)


def test_password_hash_round_trip():
    hashed = hash_password("Secret1")
    assert hashed.startswith("$2")
    assert hashed != hash_password("Secret1")
    assert verify_password("Secret1", hashed)
    assert not verify_password("Secret2", hashed)
