"""
Testy weryfikacji tokenow JWT (Supabase Auth).
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from storefront.services.token_service import JwtConfig, TokenFailure, TokenVerifier
from tests.conftest import TEST_AUDIENCE, TEST_SECRET


@pytest.fixture
def verifier(jwt_config):
    return TokenVerifier(jwt_config)


class TestPrefixHandling:
    def test_bearer_prefix_is_stripped(self, verifier, make_token):
        identity = verifier.verify(f"Bearer {make_token()}")

        assert identity.is_valid
        assert identity.user_id == "user-1"
        assert identity.reason is None

    def test_bearer_prefix_is_case_insensitive(self, verifier, make_token):
        assert verifier.verify(f"bearer {make_token()}").is_valid
        assert verifier.verify(f"BEARER {make_token()}").is_valid

    def test_raw_token_without_prefix(self, verifier, make_token):
        assert verifier.verify(make_token()).is_valid

    def test_strip_bearer(self):
        assert TokenVerifier.strip_bearer("Bearer a.b.c") == "a.b.c"
        assert TokenVerifier.strip_bearer("a.b.c") == "a.b.c"
        assert TokenVerifier.strip_bearer("Basic dXNlcjpwYXNz") is None
        assert TokenVerifier.strip_bearer(None) is None


class TestStructuralFailures:
    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_token(self, verifier, raw):
        identity = verifier.verify(raw)

        assert not identity.is_valid
        assert identity.reason == TokenFailure.EMPTY

    def test_bearer_without_token_is_empty(self, verifier):
        assert verifier.verify("Bearer ").reason == TokenFailure.EMPTY

    @pytest.mark.parametrize("raw", ["not-a-token", "only.two", "a.b.c.d", "Bearer only.two"])
    def test_malformed_token(self, verifier, raw):
        identity = verifier.verify(raw)

        assert not identity.is_valid
        assert identity.reason == TokenFailure.MALFORMED

    def test_garbage_segments_cannot_be_parsed(self, verifier):
        identity = verifier.verify("abc.def.ghi")

        assert not identity.is_valid
        assert identity.reason == TokenFailure.UNPARSEABLE
        assert identity.message == "Could not parse token"


class TestExpiry:
    def test_expired_token_rejected(self, verifier, make_token):
        identity = verifier.verify(make_token(expires_in=timedelta(minutes=-10)))

        assert not identity.is_valid
        assert identity.reason == TokenFailure.EXPIRED

    def test_expiry_within_clock_skew_accepted(self, verifier, make_token):
        identity = verifier.verify(make_token(expires_in=timedelta(minutes=-2)))

        assert identity.is_valid
        assert identity.user_id == "user-1"

    def test_expired_token_with_bad_signature_rejected(self, verifier, make_token):
        token = make_token(expires_in=timedelta(minutes=-10), secret="another-secret-that-is-long-enough")

        assert not verifier.verify(token).is_valid

    def test_missing_exp_rejected(self, verifier, make_token):
        identity = verifier.verify(make_token(expires_in=None))

        assert not identity.is_valid
        assert identity.reason == TokenFailure.MISSING_CLAIM

    def test_not_yet_valid(self, verifier, make_token):
        nbf = datetime.now(timezone.utc) + timedelta(minutes=30)
        identity = verifier.verify(make_token(nbf=nbf))

        assert identity.reason == TokenFailure.NOT_YET_VALID


class TestSignature:
    def test_wrong_secret_rejected(self, verifier, make_token):
        identity = verifier.verify(make_token(secret="another-secret-that-is-long-enough"))

        assert not identity.is_valid
        assert identity.reason == TokenFailure.INVALID_SIGNATURE

    def test_unsigned_token_rejected(self, verifier):
        payload = {
            "sub": "user-1",
            "aud": TEST_AUDIENCE,
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        }
        token = jwt.encode(payload, None, algorithm="none")

        identity = verifier.verify(token)

        assert not identity.is_valid
        assert identity.reason == TokenFailure.INVALID_SIGNATURE


class TestIssuerAndAudience:
    def test_issuer_prefix_match_accepted(self, make_token):
        verifier = TokenVerifier(JwtConfig(secret=TEST_SECRET, issuer="https://project.supabase.co"))

        assert verifier.verify(make_token()).is_valid

    def test_wrong_issuer_rejected(self, verifier, make_token):
        identity = verifier.verify(make_token(iss="https://evil.example.com"))

        assert identity.reason == TokenFailure.INVALID_ISSUER

    def test_missing_issuer_rejected_when_configured(self, verifier, make_token):
        identity = verifier.verify(make_token(iss=None))

        assert identity.reason == TokenFailure.INVALID_ISSUER

    def test_wrong_audience_rejected(self, verifier, make_token):
        identity = verifier.verify(make_token(aud="anon"))

        assert identity.reason == TokenFailure.INVALID_AUDIENCE

    def test_missing_audience_rejected_when_configured(self, verifier, make_token):
        identity = verifier.verify(make_token(aud=None))

        assert identity.reason == TokenFailure.INVALID_AUDIENCE

    def test_audience_list_membership(self, verifier, make_token):
        assert verifier.verify(make_token(aud=["other", TEST_AUDIENCE])).is_valid

    def test_unset_issuer_and_audience_are_skipped(self, make_token):
        verifier = TokenVerifier(JwtConfig(secret=TEST_SECRET))

        assert verifier.verify(make_token(iss="anything", aud="anything")).is_valid


class TestUserId:
    def test_user_id_claim_fallback(self, verifier, make_token):
        identity = verifier.verify(make_token(sub=None, user_id="user-2"))

        assert identity.user_id == "user-2"

    def test_id_claim_fallback(self, verifier, make_token):
        identity = verifier.verify(make_token(sub=None, id="user-3"))

        assert identity.user_id == "user-3"

    def test_empty_sub_falls_through(self, verifier, make_token):
        identity = verifier.verify(make_token(sub="", user_id="user-2"))

        assert identity.user_id == "user-2"

    def test_numeric_sub_accepted_like_unverified_read(self, verifier, make_token):
        token = make_token(sub=12345)

        identity = verifier.verify(token)

        assert identity.is_valid
        assert identity.user_id == "12345"
        assert verifier.extract_user_id(token) == identity.user_id

    def test_valid_token_without_user_id_rejected(self, verifier, make_token):
        identity = verifier.verify(make_token(sub=None))

        assert not identity.is_valid
        assert identity.reason == TokenFailure.MISSING_USER_ID

    def test_extract_user_id_ignores_signature(self, verifier, make_token):
        token = make_token(sub="user-9", secret="another-secret-that-is-long-enough")

        assert not verifier.verify(token).is_valid
        assert verifier.extract_user_id(f"Bearer {token}") == "user-9"

    def test_extract_user_id_order(self, verifier, make_token):
        token = make_token(sub=None, user_id="from-user-id", id="from-id")

        assert verifier.extract_user_id(token) == "from-user-id"

    def test_extract_user_id_from_garbage(self, verifier):
        assert verifier.extract_user_id("abc.def.ghi") is None
        assert verifier.extract_user_id("nope") is None
        assert verifier.extract_user_id(None) is None


def test_empty_secret_is_a_configuration_error():
    with pytest.raises(ValueError):
        JwtConfig(secret="")
