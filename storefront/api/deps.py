# storefront/api/deps.py
from fastapi import Depends, Header, HTTPException, Request

from storefront.services.token_service import TokenVerifier
from storefront.utils.logging import get_logger
from storefront.utils.result import Err, ErrorKind

logger = get_logger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STOCK_CONFLICT: 409,
    ErrorKind.PERSISTENCE: 500,
}


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_current_user(
    authorization: str | None = Header(None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> str:
    identity = verifier.verify(authorization)
    if not identity.is_valid:
        # powod tylko do logow, klient dostaje samo 401
        logger.warning(f"Authentication failed ({identity.reason.value}): {identity.message}")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity.user_id


def raise_for_error(error: Err):
    raise HTTPException(status_code=_STATUS_BY_KIND.get(error.kind, 500), detail=error.message)
