"""Root conftest: async DB, seeded users and catalog, HTTP client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the default category seeded
    - get_db, renderer and delivery channel dependencies are overridden for HTTP tests
"""

import os

# Must be set before app.users is imported
os.environ.setdefault("SECRET", "test-secret-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("EMAIL_TRANSPORT", "dummy")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import AddressSettings, Category, GlobalQuestion, Role, User
from app.services.access import Identity
from app.services.catalog import ensure_default_category
from app.services.mailer import get_delivery_channel
from app.services.renderer import get_book_renderer
from tests.fakes import FakeChannel, FakeRenderer


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await ensure_default_category(session)
    return factory


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
async def client(test_session_factory, renderer, channel):
    """FastAPI test client with DB, renderer and delivery channel overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_book_renderer] = lambda: renderer
    app.dependency_overrides[get_delivery_channel] = lambda: channel

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def owner(test_db):
    user = User(email="owner@example.com", hashed_password="x", is_active=True)
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def stranger(test_db):
    user = User(email="stranger@example.com", hashed_password="x", is_active=True)
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def admin(test_db):
    user = User(email="admin@example.com", hashed_password="x", is_active=True, is_superuser=True)
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
def owner_identity(owner):
    return Identity(user_id=owner.id)


@pytest.fixture
def admin_identity(admin):
    return Identity(user_id=admin.id, role=Role.admin)


@pytest.fixture
async def owner_address(test_db, owner):
    address = AddressSettings(
        user_id=owner.id,
        full_name="Anna Example",
        country="Exampleland",
        city="Sample City",
        street="Main street",
        building="12",
        postal_code="101000",
    )
    test_db.add(address)
    await test_db.commit()
    return address


@pytest.fixture
async def make_category(test_db):
    async def _make(name: str, category_id=None) -> Category:
        cat = Category(id=category_id, name=name) if category_id else Category(name=name)
        test_db.add(cat)
        await test_db.commit()
        return cat
    return _make


@pytest.fixture
async def make_global_question(test_db):
    async def _make(title: str, category: Category) -> GlobalQuestion:
        gq = GlobalQuestion(title=title, category_id=category.id)
        test_db.add(gq)
        await test_db.commit()
        return gq
    return _make
