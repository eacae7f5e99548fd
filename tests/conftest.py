"""Pytest configuration for all tests."""

from typing import AsyncGenerator
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport

from solestore.config import get_database
from tests.fakes import FakeVariantRepository


@pytest.fixture
def product_id() -> str:
    return str(ObjectId())


@pytest.fixture
def variant_repo(product_id) -> FakeVariantRepository:
    return FakeVariantRepository(product_ids=[product_id])


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with the database dependency stubbed."""
    from solestore.app import app

    app.dependency_overrides[get_database] = lambda: MagicMock()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
