# storefront/api/routers/auth.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_current_user
from storefront.domain.schemas import AuthStatusOut

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.get("/validate", response_model=AuthStatusOut)
def validate_token(user_id: str = Depends(get_current_user)):
    """
    Endpoint chroniony - jesli tu dotarlismy, token jest poprawny.
    Tokeny wystawia Supabase Auth, API tylko je weryfikuje.
    """
    return {"is_authenticated": True, "user_id": user_id}
