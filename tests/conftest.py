"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Mock config module completely before any imports
config_mock = MagicMock()
config_mock.DB_URL = "sqlite+aiosqlite:///:memory:"  # In-memory test database
config_mock.SQL_ECHO = False
config_mock.ADMIN_ID_LIST = [123456789]  # Test admin ID
config_mock.REDIS_HOST = "localhost"
config_mock.REDIS_PORT = 6379
config_mock.REDIS_PASSWORD = None
config_mock.CACHE_KEY_PREFIX = "storefront"
config_mock.CACHE_INVALIDATION_ENABLED = True
config_mock.LOG_LEVEL = "INFO"
config_mock.LOG_MASK_SECRETS = True
config_mock.LOG_RETENTION_DAYS = 7

sys.modules['config'] = config_mock

ADMIN_ID = 123456789

from models.base import Base
from models.category import Category
from models.parameter import ParameterGroup, Parameter
from models.product import Product, ProductParameterGroup
from models.special import Special, SpecialItem
from enums.special_status import SpecialStatus
from services.cache_invalidation import CacheInvalidationService
from services.notification import NotificationService
from utils.selection import encode_selection


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def engine():
    """Create in-memory SQLite database (foreign keys on via db.py listener)."""
    import db  # registers the PRAGMA foreign_keys listener
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Sync session; the services accept AsyncSession | Session."""
    session = Session(engine)
    yield session
    session.rollback()
    session.close()


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


# ============================================================================
# Side channel isolation
# ============================================================================

@pytest.fixture(autouse=True)
def reset_side_channels():
    CacheInvalidationService.clear_subscribers()
    NotificationService.clear_senders()
    yield
    CacheInvalidationService.clear_subscribers()
    NotificationService.clear_senders()


# ============================================================================
# Catalogue Fixtures
# ============================================================================

@pytest.fixture
def catalogue(session):
    """
    Committed sample catalogue:

    - enclosure: base 100, Color (default red +0, blue +5)
    - lid: base 20, Material without default (pla +0, petg +3.5)
    - disabled: base 50, no parameter groups, is_enabled=False
    - bundle: special 'Starter bundle', price 200, available:
      2x enclosure/blue + 1x lid/petg (original price 233.5)
    - draft: special 'Draft bundle', price 10, 1x lid/pla, draft
    """
    category = Category(name="Enclosures")
    session.add(category)
    session.flush()

    color = ParameterGroup(name="Color")
    material = ParameterGroup(name="Material")
    session.add_all([color, material])
    session.flush()

    red = Parameter(parameter_group_id=color.id, name="Red", price_modifier=0.0, display_order=0)
    blue = Parameter(parameter_group_id=color.id, name="Blue", price_modifier=5.0, display_order=1)
    pla = Parameter(parameter_group_id=material.id, name="PLA", price_modifier=0.0, display_order=0)
    petg = Parameter(parameter_group_id=material.id, name="PETG", price_modifier=3.5, display_order=1)
    session.add_all([red, blue, pla, petg])
    session.flush()

    enclosure = Product(category_id=category.id, name="Enclosure", base_price=100.0, is_enabled=True)
    lid = Product(category_id=category.id, name="Lid", base_price=20.0, is_enabled=True)
    disabled = Product(category_id=category.id, name="Retired case", base_price=50.0, is_enabled=False)
    session.add_all([enclosure, lid, disabled])
    session.flush()

    session.add_all([
        ProductParameterGroup(product_id=enclosure.id, parameter_group_id=color.id,
                              default_parameter_id=red.id, display_order=0),
        ProductParameterGroup(product_id=lid.id, parameter_group_id=material.id,
                              default_parameter_id=None, display_order=0),
    ])

    bundle = Special(name="Starter bundle", price=200.0, status=SpecialStatus.AVAILABLE)
    draft = Special(name="Draft bundle", price=10.0, status=SpecialStatus.DRAFT)
    session.add_all([bundle, draft])
    session.flush()

    session.add_all([
        SpecialItem(special_id=bundle.id, product_id=enclosure.id, quantity=2,
                    selected_parameters=encode_selection({color.id: blue.id}), display_order=0),
        SpecialItem(special_id=bundle.id, product_id=lid.id, quantity=1,
                    selected_parameters=encode_selection({material.id: petg.id}), display_order=1),
        SpecialItem(special_id=draft.id, product_id=lid.id, quantity=1,
                    selected_parameters=encode_selection({material.id: pla.id}), display_order=0),
    ])
    session.commit()

    return SimpleNamespace(
        category_id=category.id,
        color_id=color.id,
        material_id=material.id,
        red_id=red.id,
        blue_id=blue.id,
        pla_id=pla.id,
        petg_id=petg.id,
        enclosure_id=enclosure.id,
        lid_id=lid.id,
        disabled_id=disabled.id,
        bundle_id=bundle.id,
        draft_id=draft.id,
    )
