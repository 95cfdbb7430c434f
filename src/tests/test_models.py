"""Unit tests for model helpers: PackageStatus parsing and to_dict()."""

import pytest

from parcel_tracker.models import PackageStatus, TERMINAL_STATUSES
from parcel_tracker.services import package_service

from accounts import COURIER, RECIPIENT, SENDER, T0


class TestPackageStatus:
    """Tests for the PackageStatus enum."""

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {
            PackageStatus.DELIVERED,
            PackageStatus.CANCELLED,
            PackageStatus.RETURNED,
        }
        assert not PackageStatus.CREATED.is_terminal
        assert not PackageStatus.IN_TRANSIT.is_terminal
        assert not PackageStatus.OUT_FOR_DELIVERY.is_terminal
        assert PackageStatus.RETURNED.is_terminal

    @pytest.mark.parametrize(
        "value",
        ["out_for_delivery", "OUT_FOR_DELIVERY", "OutForDelivery", " out_for_delivery ", PackageStatus.OUT_FOR_DELIVERY],
    )
    def test_parse_accepts_spellings(self, value):
        assert PackageStatus.parse(value) is PackageStatus.OUT_FOR_DELIVERY

    @pytest.mark.parametrize("value", ["lost", "", None, 3])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(ValueError):
            PackageStatus.parse(value)


class TestToDict:
    """Tests for Package.to_dict()."""

    def test_package_to_dict(self, assigned_package_id):
        package_service.add_checkpoint(COURIER, assigned_package_id, "Hub", "sorted", now=T0 + 30)
        package = package_service.get_package(assigned_package_id)

        data = package.to_dict(include_relationships=True)

        assert data["id"] == assigned_package_id
        assert data["status"] == "created"
        assert data["sender"] == SENDER
        assert data["recipient"] == RECIPIENT
        assert data["courier"] == COURIER
        assert data["is_finalized"] is False
        assert data["checkpoint_count"] == 1
        assert data["updated_at"] == T0 + 30
        assert data["updated_at_iso"].startswith("2023-11-14T22:13:50")
        assert data["checkpoints"][0]["location"] == "Hub"
        assert data["checkpoints"][0]["sequence"] == 0
