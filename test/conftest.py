"""
Pytest configuration and fixtures for custom fields tests
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import Column, Integer, String
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from custom_fields.database import Base, enable_sqlite_foreign_keys, get_db
from custom_fields.exception_handlers import register_exception_handlers
from custom_fields.routes import api_v1_router
from custom_fields.services import schema_registry

# Test database URL (SQLite in-memory for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Host models live outside the package metadata, like an application's own models
HostBase = declarative_base()


class Partner(HostBase):
    __tablename__ = "partners"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)


PARTNER_FIELDS = [
    {
        "key": "industry",
        "label": {"en": "Industry", "ar": "الصناعة"},
        "type": "text",
        "show_in_table": True,
    },
    {
        "key": "priority",
        "label": "Priority",
        "type": "select",
        "required": True,
        "show_in_table": True,
        "options": [
            {"value": "high", "label": {"en": "High", "ar": "عالية"}},
            {"value": "medium", "label": "Medium"},
            {"value": "low", "label": "Low"},
        ],
    },
    {"key": "established_date", "label": "Established", "type": "date"},
    {"key": "is_preferred", "label": "Preferred Partner", "type": "boolean"},
    {
        "key": "annual_revenue",
        "label": "Annual Revenue",
        "type": "number",
        "validation_rules": ["min:0"],
    },
    {"key": "notes", "label": "Notes", "type": "textarea"},
]


@pytest.fixture(scope="function")
async def test_engine():
    """Fresh in-memory database per test; StaticPool shares it across sessions."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(HostBase.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(HostBase.metadata.drop_all)
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def partner_fields():
    return [dict(field) for field in PARTNER_FIELDS]


@pytest.fixture
async def partner_schema(db_session, partner_fields):
    return await schema_registry.create_schema(
        db_session,
        owner_type="Partner",
        name={"en": "Partner Fields", "ar": "حقول الشريك"},
        description="Additional partner information",
        field_definitions=partner_fields,
    )


@pytest.fixture
async def partner(db_session):
    instance = Partner(name="Acme Corp")
    db_session.add(instance)
    await db_session.commit()
    await db_session.refresh(instance)
    return instance


@pytest.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database dependency override"""
    # Create a minimal test app without lifespan
    test_app = FastAPI()
    test_app.include_router(api_v1_router)

    # Register exception handlers for proper error handling
    register_exception_handlers(test_app)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    test_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as test_client:
        yield test_client
    test_app.dependency_overrides.clear()


@pytest.fixture
def partner_model():
    return Partner
