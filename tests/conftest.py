"""
Global pytest configuration and fixtures for all tests.

Every test gets its own SQLite file database; the FastAPI app is pointed at
it through dependency_overrides.
"""

import os
import tempfile
from types import SimpleNamespace

import pytest

# Must be set before any app module reads config
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'bootstrap.db')}"
os.environ["NOTIFICATIONS_ENABLED"] = "true"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from auth.dependencies import create_access_token  # noqa: E402
from database.config import build_engine, get_db, init_db  # noqa: E402
from database.models import Brand, CreatorProfile, User, UserTypeDB  # noqa: E402
from server import app  # noqa: E402
from workflow.campaign_state import create_campaign  # noqa: E402


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def other_db(session_factory):
    """A second, independent session for racing another actor."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# Sample Data
# ============================================================================

def _creator(email, name, category, followers, avg_views):
    return User(
        email=email,
        name=name,
        user_type=UserTypeDB.CREATOR,
        creator_profile=CreatorProfile(
            display_name=name,
            category=category,
            followers=followers,
            avg_views=avg_views,
        ),
    )


@pytest.fixture
def world(db):
    """One brand with an owner and an employee, a rival brand, an admin, three creators and a campaign."""
    brand = Brand(name="Acme Audio", industry="Electronics")
    rival = Brand(name="Rival Co")
    admin = User(email="admin@platform.test", name="Platform Admin", user_type=UserTypeDB.ADMIN)
    owner = User(email="owner@acme.test", name="Acme Owner", user_type=UserTypeDB.BRAND_OWNER, brand=brand)
    employee = User(email="emp@acme.test", name="Acme Employee", user_type=UserTypeDB.BRAND_EMP, brand=brand)
    outsider = User(email="owner@rival.test", name="Rival Owner", user_type=UserTypeDB.BRAND_OWNER, brand=rival)
    creator_a = _creator("asha@creators.test", "Asha", "tech", 120000, 20000)
    creator_b = _creator("ben@creators.test", "Ben", "tech", 80000, 15000)
    creator_c = _creator("cara@creators.test", "Cara", "cooking", 5000, 1000)

    db.add_all([brand, rival, admin, owner, employee, outsider, creator_a, creator_b, creator_c])
    db.commit()

    campaign = create_campaign(db, owner, {
        "name": "Headphones Launch",
        "budget": 500000,
        "cost_per_view": 2,
        "target_categories": ["tech"],
        "min_followers": 10000,
        "max_followers": 500000,
        "creator_count": 2,
    })

    return SimpleNamespace(
        brand=brand,
        rival=rival,
        admin=admin,
        owner=owner,
        employee=employee,
        outsider=outsider,
        creator_a=creator_a,
        creator_b=creator_b,
        creator_c=creator_c,
        campaign=campaign,
    )


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.email)}"}


@pytest.fixture
def headers():
    return auth_headers
