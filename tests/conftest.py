"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import os

# Mandatory secret key for settings validation
os.environ.setdefault("SECRET_KEY", "test-secret-key")
# The module-level engine must never point at a real server during tests
os.environ["DATABASE__URL"] = "sqlite+aiosqlite:///:memory:"

import functools

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from infrastructure.models import Base
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork
from tests.fakes import StubGateway


@pytest_asyncio.fixture
async def session_factory():
    # one shared in-memory database per test
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def uow_factory(session_factory):
    return functools.partial(SQLAlchemyUnitOfWork, session_factory)


@pytest.fixture
def gateway():
    return StubGateway()
