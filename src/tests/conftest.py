"""Pytest configuration and fixtures for service layer tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from parcel_tracker.models.base import Base
from parcel_tracker.services import notification_service, registry_service

from accounts import COURIER, OPERATOR, OTHER_COURIER, OWNER, RECIPIENT, SENDER, T0


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the database to the test
    4. Drops all tables after the test completes
    """
    engine = create_engine("sqlite:///:memory:", echo=False)

    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import parcel_tracker.services.database as db_module

    original_get_session_factory = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session_factory
    notification_service.clear_subscribers()


@pytest.fixture(scope="function")
def registry(test_db):
    """Deploy a registry owned by OWNER at T0."""
    return registry_service.deploy_registry(OWNER, now=T0)


@pytest.fixture(scope="function")
def staffed_registry(registry):
    """Registry with one operator and two whitelisted couriers."""
    registry_service.set_operator(OWNER, OPERATOR, True, now=T0)
    registry_service.set_courier(OWNER, COURIER, True, now=T0)
    registry_service.set_courier(OWNER, OTHER_COURIER, True, now=T0)
    return registry


@pytest.fixture(scope="function")
def package_id(staffed_registry):
    """A freshly created package (status CREATED, no courier)."""
    from parcel_tracker.services import package_service

    return package_service.create_package(
        SENDER, RECIPIENT, "Box", "Warehouse A", now=T0 + 10
    )


@pytest.fixture(scope="function")
def assigned_package_id(package_id):
    """A package assigned to COURIER."""
    from parcel_tracker.services import package_service

    package_service.assign_courier(OPERATOR, package_id, COURIER, now=T0 + 20)
    return package_id
