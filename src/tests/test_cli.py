"""Tests for the parcel-tracker command-line interface.

The CLI runs against the per-test in-memory database; database
initialization is stubbed out because test_db already created the tables,
and connection cleanup is recorded rather than run.
"""

import json

import pytest

from parcel_tracker import cli
from parcel_tracker.services import package_service, registry_service

from accounts import COURIER, OWNER, RECIPIENT, SENDER, STRANGER


@pytest.fixture
def closed_connections(monkeypatch):
    """Record close_connections() calls instead of disposing the engine."""
    calls = []
    monkeypatch.setattr(cli, "close_connections", lambda: calls.append(True))
    return calls


@pytest.fixture
def run_cli(test_db, closed_connections, monkeypatch, capsys):
    """Run the CLI and return (exit_code, stdout)."""
    monkeypatch.setattr(cli, "initialize_app_database", lambda: None)

    def _run(*argv):
        code = cli.main(list(argv))
        return code, capsys.readouterr().out

    return _run


def test_no_command_prints_help(run_cli):
    code, out = run_cli()
    assert code == 1
    assert "usage" in out.lower()


def test_full_lifecycle(run_cli):
    code, out = run_cli("--now", "1000", "deploy", "--owner", OWNER)
    assert code == 0
    assert json.loads(out)["owner"] == OWNER

    assert run_cli("set-courier", COURIER, "--as", OWNER)[0] == 0

    code, out = run_cli(
        "create", "--recipient", RECIPIENT, "--description", "Box", "--pickup", "Warehouse A", "--as", SENDER
    )
    assert code == 0
    assert json.loads(out) == {"id": 1}

    assert run_cli("assign", "1", COURIER, "--as", OWNER)[0] == 0

    code, out = run_cli("update-status", "1", "in_transit", "--reason", "loaded", "--as", COURIER)
    assert code == 0
    assert json.loads(out)["status"] == "in_transit"

    assert run_cli("checkpoint", "1", "Hub", "--note", "sorted", "--as", COURIER)[0] == 0

    code, out = run_cli("confirm-delivery", "1", "--proof-hash", "hash123", "--as", RECIPIENT)
    assert code == 0
    assert json.loads(out)["status"] == "delivered"

    code, out = run_cli("show", "1")
    shown = json.loads(out)
    assert shown["courier"] == COURIER
    assert shown["checkpoints"][0]["location"] == "Hub"

    code, out = run_cli("next-id")
    assert json.loads(out) == {"next_id": 2}

    code, out = run_cli("events", "--package", "1")
    assert [event["name"] for event in json.loads(out)] == [
        "PackageCreated",
        "CourierAssigned",
        "StatusUpdated",
        "CheckpointAdded",
        "Delivered",
    ]


def test_service_error_exits_nonzero(run_cli):
    run_cli("deploy", "--owner", OWNER)

    code, out = run_cli("pause", "--as", STRANGER)

    assert code == 1
    assert out.startswith("ERROR:")
    assert registry_service.is_paused() is False


def test_roles_and_revoke(run_cli):
    run_cli("deploy", "--owner", OWNER)
    run_cli("set-operator", STRANGER, "--as", OWNER)
    run_cli("set-courier", COURIER, "--as", OWNER)
    run_cli("set-courier", COURIER, "--revoke", "--as", STRANGER)

    code, out = run_cli("roles")

    assert code == 0
    assert json.loads(out) == {
        "owner": OWNER,
        "paused": False,
        "operators": [STRANGER],
        "couriers": [],
    }


def test_list_with_status_filter(run_cli):
    run_cli("deploy", "--owner", OWNER)
    package_service.create_package(SENDER, RECIPIENT, "Box", "A")
    package_service.create_package(SENDER, RECIPIENT, "Box", "B")
    run_cli("cancel", "2", "--reason", "dup", "--as", OWNER)

    code, out = run_cli("list", "--status", "cancelled")

    assert code == 0
    assert [package["id"] for package in json.loads(out)] == [2]


def test_invalid_status_choice_rejected(run_cli):
    with pytest.raises(SystemExit):
        run_cli("update-status", "1", "teleported", "--as", OWNER)


def test_out_of_range_now_reports_error(run_cli):
    run_cli("deploy", "--owner", OWNER)

    code, out = run_cli(
        "--now", "99999999999999999999", "create", "--recipient", RECIPIENT, "--as", SENDER
    )

    assert code == 1
    assert out.startswith("ERROR:")
    assert package_service.next_package_id() == 1


def test_connections_closed_after_each_command(run_cli, closed_connections):
    run_cli("deploy", "--owner", OWNER)
    run_cli("pause", "--as", STRANGER)

    assert closed_connections == [True, True]
