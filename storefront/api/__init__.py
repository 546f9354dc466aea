# storefront/api/__init__.py
from fastapi import FastAPI

from storefront.api.routers import auth, cart, health, products
from storefront.services.token_service import JwtConfig, TokenVerifier


def create_app(jwt_config: JwtConfig | None = None) -> FastAPI:
    app = FastAPI(title="Storefront API", version="1.0.0")

    # konfiguracja JWT budowana raz przy starcie
    app.state.token_verifier = TokenVerifier(jwt_config or JwtConfig.from_settings())

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(cart.router)

    return app
