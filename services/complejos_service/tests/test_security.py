import base64
import json

import pytest
from jose import jwt
from pydantic import ValidationError

from security import InvalidTokenError, MissingClaimError, TokenService
from settings import Settings

SECRET = "test-secret"


@pytest.fixture
def service():
    return TokenService(SECRET)


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def test_issue_and_validate_round_trip(service):
    token = service.issue("abc-123", "admin", "boss")
    identity = service.validate(token)
    assert (identity.id, identity.username, identity.role) == ("abc-123", "boss", "admin")


def test_issued_token_has_exactly_three_claims_and_no_expiry(service):
    claims = jwt.get_unverified_claims(service.issue("abc-123", "user", "ana"))
    assert claims == {"_id": "abc-123", "username": "ana", "role": "user"}


def test_empty_secret_is_rejected():
    with pytest.raises(ValueError):
        TokenService("")


def test_token_signed_with_other_secret_is_invalid(service):
    token = jwt.encode({"_id": "1", "username": "u", "role": "user"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        service.validate(token)


def test_token_with_other_algorithm_is_invalid(service):
    token = jwt.encode({"_id": "1", "username": "u", "role": "user"}, SECRET, algorithm="HS512")
    with pytest.raises(InvalidTokenError):
        service.validate(token)


def test_unsigned_token_is_invalid(service):
    token = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64({'_id': '1', 'username': 'u', 'role': 'admin'})}."
    with pytest.raises(InvalidTokenError):
        service.validate(token)


def test_garbage_is_invalid(service):
    with pytest.raises(InvalidTokenError):
        service.validate("not-a-token")


@pytest.mark.parametrize("claims,missing", [
    ({"_id": "1", "username": "u"}, "role"),
    ({"_id": "1", "username": "u", "role": ""}, "role"),
    ({"_id": "1", "role": "user"}, "username"),
    ({"username": "u", "role": "user"}, "_id"),
    ({"_id": 7, "username": "u", "role": "user"}, "_id"),
])
def test_missing_or_empty_claims(service, claims, missing):
    token = jwt.encode(claims, SECRET, algorithm="HS256")
    with pytest.raises(MissingClaimError) as excinfo:
        service.validate(token)
    assert excinfo.value.claim == missing


def test_bad_signature_is_reported_before_missing_claims(service):
    token = jwt.encode({"foo": "bar"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        service.validate(token)


@pytest.mark.parametrize("algorithm", ["RS256", "ES256", "none", "hs256"])
def test_only_hmac_algorithms_are_accepted(algorithm):
    with pytest.raises(ValueError):
        TokenService(SECRET, algorithm)


@pytest.mark.parametrize("algorithm", ["HS256", "HS384", "HS512"])
def test_hmac_algorithms_round_trip(algorithm):
    service = TokenService(SECRET, algorithm)
    assert service.validate(service.issue("1", "user", "ana")).username == "ana"


def test_settings_reject_asymmetric_algorithm():
    with pytest.raises(ValidationError):
        Settings(jwt_secret=SECRET, jwt_algorithm="RS256", _env_file=None)
