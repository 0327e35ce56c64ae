from pathlib import Path

from dotenv import load_dotenv

# Load environment variables for tests before the app reads its settings
load_dotenv(Path(__file__).resolve().parents[1] / ".env.test")

import fakeredis  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Booking, Business, MoversProviderConfig, Profile, UserRole  # noqa: E402
from app.utils.redis_cache import QueryCache, get_query_cache  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, expire_on_commit=False)
    db = Session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeStrictRedis()


@pytest.fixture
def query_cache(fake_redis):
    return QueryCache(fake_redis, ttl_seconds=60)


@pytest.fixture
def client(db_session, query_cache):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_query_cache] = lambda: query_cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_header():
    def _header(profile: Profile) -> dict:
        token = jwt.encode({"sub": str(profile.id)}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture
def make_profile(db_session):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.CUSTOMER, **fields) -> Profile:
        counter["n"] += 1
        profile = Profile(
            email=fields.pop("email", f"user{counter['n']}@example.com"),
            full_name=fields.pop("full_name", f"User {counter['n']}"),
            role=role,
            **fields,
        )
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile

    return _make


@pytest.fixture
def make_business(db_session):
    def _make(owner: Profile, **fields) -> Business:
        values = {"name": "Valley Movers", "status": "verified", "verified": True}
        values.update(fields)
        business = Business(owner_id=owner.id, **values)
        db_session.add(business)
        db_session.commit()
        db_session.refresh(business)
        return business

    return _make


@pytest.fixture
def make_booking(db_session):
    def _make(business: Business, customer: Profile, **fields) -> Booking:
        values = {
            "requested_date": "2025-07-01",
            "service_address": "123 Main St, Los Angeles, CA 91605",
            "service_details": {},
        }
        values.update(fields)
        booking = Booking(customer_id=customer.id, business_id=business.id, **values)
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _make


@pytest.fixture
def make_provider_config(db_session):
    def _make(business: Business, **fields) -> MoversProviderConfig:
        row = MoversProviderConfig(business_id=business.id, **fields)
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row

    return _make
