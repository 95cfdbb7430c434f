"""Tests for the global pause switch.

While paused every package mutation fails with PausedError and changes
nothing; administration and read operations keep working.
"""

import pytest

from parcel_tracker.models import PackageStatus
from parcel_tracker.services import notification_service, package_service, registry_service
from parcel_tracker.services.exceptions import PausedError

from accounts import COURIER, OPERATOR, OTHER_COURIER, OWNER, RECIPIENT, SENDER, STRANGER


PACKAGE_MUTATIONS = {
    "create_package": lambda pid: package_service.create_package(SENDER, RECIPIENT, "Box", "A"),
    "assign_courier": lambda pid: package_service.assign_courier(OWNER, pid, OTHER_COURIER),
    "update_status": lambda pid: package_service.update_status(COURIER, pid, PackageStatus.IN_TRANSIT),
    "add_checkpoint": lambda pid: package_service.add_checkpoint(COURIER, pid, "Hub", ""),
    "confirm_delivery": lambda pid: package_service.confirm_delivery(RECIPIENT, pid, "hash"),
    "cancel": lambda pid: package_service.cancel(OWNER, pid, "stop"),
    "mark_returned": lambda pid: package_service.mark_returned(OPERATOR, pid, "back"),
}


@pytest.fixture
def paused_package_id(assigned_package_id):
    """An assigned package in a paused registry."""
    registry_service.pause(OWNER)
    return assigned_package_id


@pytest.mark.parametrize("operation", sorted(PACKAGE_MUTATIONS))
def test_mutation_rejected_while_paused(paused_package_id, operation):
    """Every package mutation fails with PausedError and leaves no trace."""
    before = package_service.get_package(paused_package_id).to_dict()
    notifications_before = len(notification_service.list_notifications())

    with pytest.raises(PausedError):
        PACKAGE_MUTATIONS[operation](paused_package_id)

    assert package_service.get_package(paused_package_id).to_dict() == before
    assert package_service.next_package_id() == 2
    assert len(notification_service.list_notifications()) == notifications_before


@pytest.mark.parametrize("operation", sorted(PACKAGE_MUTATIONS))
def test_mutation_succeeds_after_unpause(paused_package_id, operation):
    """Unpausing restores every operation."""
    registry_service.unpause(OWNER)

    PACKAGE_MUTATIONS[operation](paused_package_id)


def test_admin_allowed_while_paused(paused_package_id):
    """Role administration and pause toggles work while paused."""
    registry_service.pause(OWNER)
    registry_service.set_operator(OWNER, STRANGER, True)
    registry_service.set_courier(OPERATOR, STRANGER, True)
    registry_service.unpause(OWNER)

    assert registry_service.is_operator_account(STRANGER)
    assert registry_service.is_courier_account(STRANGER)
    assert registry_service.is_paused() is False


def test_queries_allowed_while_paused(paused_package_id):
    """Read operations ignore the pause switch."""
    assert package_service.get_package(paused_package_id).id == paused_package_id
    assert package_service.get_checkpoints(paused_package_id) == []
    assert package_service.next_package_id() == 2
    assert len(package_service.list_packages()) == 1


def test_pause_checked_before_authorization(paused_package_id):
    """A paused registry reports PausedError even to unauthorized callers."""
    with pytest.raises(PausedError):
        package_service.cancel(STRANGER, paused_package_id, "nope")
