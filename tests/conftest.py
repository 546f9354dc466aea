import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# przed importem storefront - settings czyta env przy imporcie
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-that-is-long-enough-for-hs256")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import create_app
from storefront.data import models  # noqa: F401
from storefront.data.database import Base, get_db
from storefront.data.models.product import ProductModel
from storefront.services.token_service import JwtConfig

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256"
TEST_ISSUER = "https://project.supabase.co/auth/v1"
TEST_AUDIENCE = "authenticated"


@pytest.fixture(scope="function")
def db_session():
    """
    Izolowana baza in-memory SQLite dla kazdego testu.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_product(db_session):
    def _make(name="Game", price="9.99", stock=10, category=None, description=""):
        product = ProductModel(
            name=name,
            description=description,
            price=Decimal(price),
            stock=stock,
            category=category,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def jwt_config():
    return JwtConfig(secret=TEST_SECRET, issuer=TEST_ISSUER, audience=TEST_AUDIENCE)


@pytest.fixture
def make_token():
    def _make(sub="user-1", expires_in=timedelta(hours=1), secret=TEST_SECRET, **claims):
        payload = {"iss": TEST_ISSUER, "aud": TEST_AUDIENCE, "sub": sub}
        if expires_in is not None:
            payload["exp"] = datetime.now(timezone.utc) + expires_in
        payload.update(claims)
        # None = brak claimu w tokenie
        payload = {k: v for k, v in payload.items() if v is not None}
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make


@pytest.fixture
def client(db_session, jwt_config):
    app = create_app(jwt_config)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(make_token):
    def _headers(sub="user-1"):
        return {"Authorization": f"Bearer {make_token(sub=sub)}"}

    return _headers
