"""
Test configuration and shared fixtures.

This module provides pytest fixtures used across all test modules.
"""
import os
from datetime import datetime, timezone

import pytest

# Set test environment variables before importing app
os.environ['FLASK_ENV'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['DATABASE_SSLMODE'] = ''
os.environ['SECRET_KEY'] = 'test-secret-key'

from attribution_tracker import create_app
from attribution_tracker.models.base import Database
from attribution_tracker.models.conversion import Conversion


@pytest.fixture(scope='session')
def database():
    """
    Create an in-memory SQLite database handle.

    Yields:
        Database shared by the app and the tests
    """
    database = Database('sqlite:///:memory:')

    yield database

    database.dispose()


@pytest.fixture(scope='session')
def app(database):
    """
    Create Flask app for testing.

    Yields:
        Flask app configured for testing
    """
    app = create_app({
        'TESTING': True,
        'DEBUG': False
    }, database=database)

    yield app


@pytest.fixture(scope='function', autouse=True)
def _tables(database):
    """
    Create all tables before each test and drop them afterwards.

    Each test gets a fresh database state.
    """
    database.create_all()

    yield

    database.drop_all()


@pytest.fixture(scope='function')
def db(database):
    """
    Provide a database session.

    Yields:
        Database session
    """
    with database.session() as session:
        yield session


@pytest.fixture(scope='function')
def client(app):
    """
    Provide Flask test client.

    Args:
        app: Flask app fixture

    Returns:
        Flask test client
    """
    return app.test_client()


@pytest.fixture(scope='function')
def make_conversion(db):
    """
    Factory for conversions with a fixed converted_at.

    Usage:
        make_conversion('A1', value=10, converted_at=datetime(2024, 3, 1, tzinfo=timezone.utc))
    """
    def _make(order_id, converted_at=None, **fields):
        conversion = Conversion(
            order_id=order_id,
            converted_at=converted_at or datetime(2024, 6, 1, tzinfo=timezone.utc),
            **fields
        )
        db.add(conversion)
        db.commit()
        db.refresh(conversion)
        return conversion

    return _make
