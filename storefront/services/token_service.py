# storefront/services/token_service.py
"""Weryfikacja tokenow JWT wystawianych przez Supabase Auth.

Serwis nie wystawia tokenow, sprawdza tylko podpis i claimy lokalnie.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Tuple

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    ImmatureSignatureError,
    InvalidAlgorithmError,
    InvalidAudienceError,
    InvalidSignatureError,
    MissingRequiredClaimError,
    PyJWTError,
)

from storefront.utils import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

BEARER_PREFIX = "bearer "
USER_ID_CLAIMS = ("sub", "user_id", "id")


class TokenFailure(str, Enum):
    EMPTY = "empty_token"
    MALFORMED = "malformed_token"
    EXPIRED = "token_expired"
    NOT_YET_VALID = "token_not_yet_valid"
    INVALID_ISSUER = "invalid_issuer"
    INVALID_AUDIENCE = "invalid_audience"
    INVALID_SIGNATURE = "invalid_signature"
    MISSING_CLAIM = "missing_claim"
    MISSING_USER_ID = "missing_user_id"
    UNPARSEABLE = "unparseable_token"


@dataclass(frozen=True)
class JwtConfig:
    secret: str
    issuer: str | None = None
    audience: str | None = None
    algorithms: Tuple[str, ...] = ("HS256",)
    clock_skew: timedelta = timedelta(minutes=5)

    def __post_init__(self):
        if not self.secret:
            raise ValueError("JWT secret is not configured")

    @classmethod
    def from_settings(cls) -> "JwtConfig":
        return cls(
            secret=settings.JWT_SECRET,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            algorithms=tuple(settings.JWT_ALGORITHMS),
            clock_skew=timedelta(seconds=settings.JWT_CLOCK_SKEW_SECONDS),
        )


@dataclass(frozen=True)
class VerifiedIdentity:
    user_id: str | None
    is_valid: bool
    message: str
    reason: TokenFailure | None = None
    claims: Dict[str, Any] = field(default_factory=dict)


def _rejected(reason: TokenFailure, message: str, user_id: str | None = None) -> VerifiedIdentity:
    return VerifiedIdentity(user_id=user_id, is_valid=False, message=message, reason=reason)


class TokenVerifier:
    def __init__(self, config: JwtConfig):
        self.config = config

    @staticmethod
    def strip_bearer(raw: str | None) -> str | None:
        """Zwraca sam token albo None gdy wejscie nie wyglada na token."""
        if raw is None:
            return None

        if raw[:len(BEARER_PREFIX)].lower() == BEARER_PREFIX:
            return raw[len(BEARER_PREFIX):].strip()

        candidate = raw.strip()
        if _looks_like_jwt(candidate):
            return candidate
        return None

    def extract_user_id(self, raw: str | None) -> str | None:
        """Czyta user id bez weryfikacji podpisu. Tylko do diagnostyki, nie do autoryzacji."""
        token = self.strip_bearer(raw)
        if not token or not _looks_like_jwt(token):
            return None
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except PyJWTError:
            return None
        return _user_id_from_claims(claims)

    def verify(self, raw: str | None) -> VerifiedIdentity:
        if raw is None or not raw.strip():
            return _rejected(TokenFailure.EMPTY, "Token is empty")

        token = self.strip_bearer(raw)
        if token is None:
            return _rejected(TokenFailure.MALFORMED, "Token is not a three-part JWT")
        if not token:
            return _rejected(TokenFailure.EMPTY, "Token is empty")
        if not _looks_like_jwt(token):
            return _rejected(TokenFailure.MALFORMED, "Token is not a three-part JWT")

        cfg = self.config
        try:
            claims = jwt.decode(
                token,
                cfg.secret,
                algorithms=list(cfg.algorithms),
                audience=cfg.audience,
                leeway=cfg.clock_skew,
                options={
                    "require": ["exp"],
                    "verify_aud": cfg.audience is not None,
                    # issuer sprawdzamy sami (dopuszczalny prefiks)
                    "verify_iss": False,
                    # typ sub sprawdza _user_id_from_claims (fallback sub -> user_id -> id)
                    "verify_sub": False,
                },
            )
        except ExpiredSignatureError:
            return _rejected(TokenFailure.EXPIRED, "Token has expired")
        except ImmatureSignatureError:
            return _rejected(TokenFailure.NOT_YET_VALID, "Token is not valid yet")
        except InvalidAudienceError:
            return _rejected(TokenFailure.INVALID_AUDIENCE, f"Invalid audience. Expected: {cfg.audience}")
        except MissingRequiredClaimError as e:
            if e.claim == "aud":
                return _rejected(TokenFailure.INVALID_AUDIENCE, f"Invalid audience. Expected: {cfg.audience}")
            return _rejected(TokenFailure.MISSING_CLAIM, f"Token is missing the '{e.claim}' claim")
        except (InvalidSignatureError, InvalidAlgorithmError):
            return _rejected(TokenFailure.INVALID_SIGNATURE, "Invalid token signature")
        except DecodeError:
            return _rejected(TokenFailure.UNPARSEABLE, "Could not parse token")
        except PyJWTError as e:
            logger.debug(f"Token rejected: {e}")
            return _rejected(TokenFailure.UNPARSEABLE, "Could not parse token")

        if cfg.issuer is not None:
            issuer = claims.get("iss")
            if not isinstance(issuer, str) or not (issuer == cfg.issuer or issuer.startswith(cfg.issuer)):
                return _rejected(
                    TokenFailure.INVALID_ISSUER,
                    f"Invalid issuer. Expected: {cfg.issuer}, Actual: {issuer}",
                )

        user_id = _user_id_from_claims(claims)
        if user_id is None:
            return _rejected(TokenFailure.MISSING_USER_ID, "Token does not carry a user id")

        return VerifiedIdentity(user_id=user_id, is_valid=True, message="Token is valid", claims=claims)


def _looks_like_jwt(token: str) -> bool:
    parts = token.split(".")
    return len(parts) == 3 and all(parts[:2])


def _user_id_from_claims(claims: Dict[str, Any]) -> str | None:
    for name in USER_ID_CLAIMS:
        value = claims.get(name)
        if value is None:
            continue
        value = str(value)
        if value:
            return value
    return None
