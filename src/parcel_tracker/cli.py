"""
Parcel Tracker CLI

Command-line interface to the delivery registry. Every mutating command
acts on behalf of the account given with --as; output is JSON on stdout.

Usage Examples:
    # Deploy a registry owned by 0xowner
    parcel-tracker deploy --owner 0xowner

    # Whitelist a courier and create a package
    parcel-tracker set-courier 0xcourier --as 0xowner
    parcel-tracker create --recipient 0xrecipient --description Box --pickup "Warehouse A" --as 0xsender

    # Assign, move and deliver
    parcel-tracker assign 1 0xcourier --as 0xowner
    parcel-tracker update-status 1 in_transit --reason loaded --as 0xcourier
    parcel-tracker confirm-delivery 1 --proof-hash hash123 --as 0xrecipient

    # Inspect
    parcel-tracker show 1
    parcel-tracker events --package 1
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, List, Optional

from parcel_tracker.models import PackageStatus
from parcel_tracker.services import (
    notification_service,
    package_service,
    registry_service,
)
from parcel_tracker.services.database import close_connections, initialize_app_database
from parcel_tracker.services.exceptions import ServiceError
from parcel_tracker.utils.config import Config, set_config
from parcel_tracker.utils.constants import APP_NAME, APP_VERSION, ENV_VAR_ENVIRONMENT

STATUS_CHOICES = [status.value for status in PackageStatus]


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


# ============================================================================
# Command handlers
# ============================================================================


def cmd_deploy(args) -> int:
    """Deploy a new registry."""
    state = registry_service.deploy_registry(args.owner, now=args.now)
    _print_json(state.to_dict())
    return 0


def cmd_transfer_owner(args) -> int:
    """Transfer ownership."""
    state = registry_service.transfer_ownership(args.caller, args.new_owner, now=args.now)
    _print_json(state.to_dict())
    return 0


def cmd_set_operator(args) -> int:
    """Grant or revoke operator rights."""
    allowed = not args.revoke
    registry_service.set_operator(args.caller, args.account, allowed, now=args.now)
    _print_json({"account": args.account, "operator": allowed})
    return 0


def cmd_set_courier(args) -> int:
    """Add or remove a courier."""
    allowed = not args.revoke
    registry_service.set_courier(args.caller, args.account, allowed, now=args.now)
    _print_json({"account": args.account, "courier": allowed})
    return 0


def cmd_pause(args) -> int:
    """Pause package mutations."""
    registry_service.pause(args.caller, now=args.now)
    _print_json({"paused": True})
    return 0


def cmd_unpause(args) -> int:
    """Resume package mutations."""
    registry_service.unpause(args.caller, now=args.now)
    _print_json({"paused": False})
    return 0


def cmd_create(args) -> int:
    """Create a package."""
    package_id = package_service.create_package(
        args.caller, args.recipient, args.description, args.pickup, now=args.now
    )
    _print_json({"id": package_id})
    return 0


def cmd_assign(args) -> int:
    """Assign a courier to a package."""
    package = package_service.assign_courier(args.caller, args.package_id, args.courier, now=args.now)
    _print_json(package.to_dict())
    return 0


def cmd_update_status(args) -> int:
    """Report a new package status."""
    package = package_service.update_status(
        args.caller, args.package_id, args.status, args.reason, now=args.now
    )
    _print_json(package.to_dict())
    return 0


def cmd_checkpoint(args) -> int:
    """Append a checkpoint."""
    checkpoint = package_service.add_checkpoint(
        args.caller, args.package_id, args.location, args.note, now=args.now
    )
    _print_json(checkpoint.to_dict())
    return 0


def cmd_confirm_delivery(args) -> int:
    """Confirm delivery as the recipient."""
    package = package_service.confirm_delivery(
        args.caller, args.package_id, args.proof_hash, now=args.now
    )
    _print_json(package.to_dict())
    return 0


def cmd_cancel(args) -> int:
    """Cancel a package."""
    package = package_service.cancel(args.caller, args.package_id, args.reason, now=args.now)
    _print_json(package.to_dict())
    return 0


def cmd_mark_returned(args) -> int:
    """Mark a package returned."""
    package = package_service.mark_returned(args.caller, args.package_id, args.reason, now=args.now)
    _print_json(package.to_dict())
    return 0


def cmd_show(args) -> int:
    """Show a package with its checkpoints."""
    package = package_service.get_package(args.package_id)
    _print_json(package.to_dict(include_relationships=True))
    return 0


def cmd_checkpoints(args) -> int:
    """List a package's checkpoints."""
    checkpoints = package_service.get_checkpoints(args.package_id)
    _print_json([checkpoint.to_dict() for checkpoint in checkpoints])
    return 0


def cmd_next_id(args) -> int:
    """Print the next package id."""
    _print_json({"next_id": package_service.next_package_id()})
    return 0


def cmd_list(args) -> int:
    """List packages."""
    packages = package_service.list_packages(
        status=args.status,
        sender=args.sender,
        recipient=args.recipient,
        courier=args.courier,
    )
    _print_json([package.to_dict() for package in packages])
    return 0


def cmd_events(args) -> int:
    """List notifications."""
    notifications = notification_service.list_notifications(
        package_id=args.package_id, name=args.name, after_id=args.after
    )
    _print_json([n.to_dict() for n in notifications])
    return 0


def cmd_roles(args) -> int:
    """Show owner, operators, couriers and pause state."""
    state = registry_service.get_registry()
    _print_json(
        {
            "owner": state.owner,
            "paused": state.paused,
            "operators": registry_service.list_operators(),
            "couriers": registry_service.list_couriers(),
        }
    )
    return 0


# ============================================================================
# Argument parsing
# ============================================================================


def _add_caller(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--as", dest="caller", required=True, help="Account performing the operation"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="parcel-tracker",
        description=f"{APP_NAME} - permissioned package delivery registry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  parcel-tracker deploy --owner 0xowner
  parcel-tracker create --recipient 0xr --description Box --pickup "Warehouse A" --as 0xs
  parcel-tracker update-status 1 in_transit --reason loaded --as 0xcourier
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--database-url", help="SQLAlchemy database URL (overrides config)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--now", type=int, default=None, help="Operation time in Unix seconds (default: now)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    deploy_parser = subparsers.add_parser("deploy", help="Deploy a new registry")
    deploy_parser.add_argument("--owner", required=True, help="Initial owner account")
    deploy_parser.set_defaults(handler=cmd_deploy)

    transfer_parser = subparsers.add_parser("transfer-owner", help="Transfer ownership")
    transfer_parser.add_argument("new_owner", help="New owner account")
    _add_caller(transfer_parser)
    transfer_parser.set_defaults(handler=cmd_transfer_owner)

    for name, handler, help_text in (
        ("set-operator", cmd_set_operator, "Grant or revoke operator rights"),
        ("set-courier", cmd_set_courier, "Add or remove a whitelisted courier"),
    ):
        role_parser = subparsers.add_parser(name, help=help_text)
        role_parser.add_argument("account", help="Account to update")
        role_parser.add_argument("--revoke", action="store_true", help="Remove instead of grant")
        _add_caller(role_parser)
        role_parser.set_defaults(handler=handler)

    for name, handler, help_text in (
        ("pause", cmd_pause, "Pause package mutations"),
        ("unpause", cmd_unpause, "Resume package mutations"),
    ):
        pause_parser = subparsers.add_parser(name, help=help_text)
        _add_caller(pause_parser)
        pause_parser.set_defaults(handler=handler)

    create_parser = subparsers.add_parser("create", help="Create a package")
    create_parser.add_argument("--recipient", required=True, help="Recipient account")
    create_parser.add_argument("--description", default="", help="Package description")
    create_parser.add_argument("--pickup", default="", help="Pickup location")
    _add_caller(create_parser)
    create_parser.set_defaults(handler=cmd_create)

    assign_parser = subparsers.add_parser("assign", help="Assign a courier")
    assign_parser.add_argument("package_id", type=int, help="Package ID")
    assign_parser.add_argument("courier", help="Courier account")
    _add_caller(assign_parser)
    assign_parser.set_defaults(handler=cmd_assign)

    status_parser = subparsers.add_parser("update-status", help="Report a new status")
    status_parser.add_argument("package_id", type=int, help="Package ID")
    status_parser.add_argument("status", choices=STATUS_CHOICES, help="New status")
    status_parser.add_argument("--reason", default="", help="Reason for the change")
    _add_caller(status_parser)
    status_parser.set_defaults(handler=cmd_update_status)

    checkpoint_parser = subparsers.add_parser("checkpoint", help="Append a checkpoint")
    checkpoint_parser.add_argument("package_id", type=int, help="Package ID")
    checkpoint_parser.add_argument("location", help="Checkpoint location")
    checkpoint_parser.add_argument("--note", default="", help="Checkpoint note")
    _add_caller(checkpoint_parser)
    checkpoint_parser.set_defaults(handler=cmd_checkpoint)

    deliver_parser = subparsers.add_parser("confirm-delivery", help="Confirm delivery")
    deliver_parser.add_argument("package_id", type=int, help="Package ID")
    deliver_parser.add_argument("--proof-hash", default="", help="Reference to delivery proof")
    _add_caller(deliver_parser)
    deliver_parser.set_defaults(handler=cmd_confirm_delivery)

    for name, handler, help_text in (
        ("cancel", cmd_cancel, "Cancel a package"),
        ("mark-returned", cmd_mark_returned, "Mark a package returned"),
    ):
        final_parser = subparsers.add_parser(name, help=help_text)
        final_parser.add_argument("package_id", type=int, help="Package ID")
        final_parser.add_argument("--reason", default="", help="Reason")
        _add_caller(final_parser)
        final_parser.set_defaults(handler=handler)

    show_parser = subparsers.add_parser("show", help="Show a package")
    show_parser.add_argument("package_id", type=int, help="Package ID")
    show_parser.set_defaults(handler=cmd_show)

    checkpoints_parser = subparsers.add_parser("checkpoints", help="List package checkpoints")
    checkpoints_parser.add_argument("package_id", type=int, help="Package ID")
    checkpoints_parser.set_defaults(handler=cmd_checkpoints)

    next_id_parser = subparsers.add_parser("next-id", help="Show the next package id")
    next_id_parser.set_defaults(handler=cmd_next_id)

    list_parser = subparsers.add_parser("list", help="List packages")
    list_parser.add_argument("--status", choices=STATUS_CHOICES, help="Filter by status")
    list_parser.add_argument("--sender", help="Filter by sender")
    list_parser.add_argument("--recipient", help="Filter by recipient")
    list_parser.add_argument("--courier", help="Filter by courier")
    list_parser.set_defaults(handler=cmd_list)

    events_parser = subparsers.add_parser("events", help="List notifications")
    events_parser.add_argument("--package", dest="package_id", type=int, help="Filter by package")
    events_parser.add_argument("--name", help="Filter by notification name")
    events_parser.add_argument("--after", type=int, help="Only notifications after this id")
    events_parser.set_defaults(handler=cmd_events)

    roles_parser = subparsers.add_parser("roles", help="Show role assignments and pause state")
    roles_parser.set_defaults(handler=cmd_roles)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.database_url:
        environment = os.environ.get(ENV_VAR_ENVIRONMENT, "production")
        set_config(Config(environment, database_url=args.database_url))

    initialize_app_database()

    try:
        return args.handler(args)
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        close_connections()


if __name__ == "__main__":
    sys.exit(main())
