"""CLI for propvisit: manage the on-device account, properties and visits."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from datetime import datetime

from propvisit.config import get_settings
from propvisit.data_layer import DataLayer, open_data_layer
from propvisit.errors import PropVisitError


def _prompt_password(args, confirm: bool = False) -> str:
    password = args.password
    if not password:
        password = getpass.getpass("Password: ")
        if confirm and password != getpass.getpass("Confirm password: "):
            print("Passwords do not match")
            sys.exit(1)
    return password


async def cmd_register(layer: DataLayer, args):
    """Create an account and log in as it."""
    password = _prompt_password(args, confirm=True)
    result = await layer.register(args.email, args.name, password, phone=args.phone)
    print(f"Registered {result.user.email} (id={result.user.id})")


async def cmd_login(layer: DataLayer, args):
    password = _prompt_password(args)
    result = await layer.login(args.email, password)
    print(f"Logged in as {result.user.name} <{result.user.email}>")


async def cmd_logout(layer: DataLayer, args):
    await layer.logout()
    print("Logged out")


async def cmd_whoami(layer: DataLayer, args):
    user = await layer.current_user()
    if user is None:
        print("Not logged in")
        return
    print(f"{user.name} <{user.email}> (id={user.id})")


async def cmd_add_property(layer: DataLayer, args):
    prop = await layer.create_property(args.name, args.address, args.description)
    print(f"Property created: {prop.name} (id={prop.id})")


async def cmd_properties(layer: DataLayer, args):
    props = await layer.list_properties()
    if not props:
        print("No properties")
    for p in props:
        print(f"{p.id}  {p.name}  {p.address}")


async def cmd_schedule_visit(layer: DataLayer, args):
    try:
        visit_date = datetime.fromisoformat(args.date)
    except ValueError:
        print(f"Invalid date: {args.date} (expected ISO format, e.g. 2024-03-01T10:30)")
        sys.exit(1)
    visit = await layer.create_visit(args.property, visit_date, args.parking, args.reason)
    print(f"Visit scheduled for {visit.visit_date.isoformat()} (id={visit.id})")


async def cmd_visits(layer: DataLayer, args):
    if args.property:
        visits = await layer.list_visits_by_property(args.property)
        rows = [(v, args.property) for v in visits]
    else:
        rows = [(v, v.property_name or v.property_id) for v in await layer.list_visits_with_properties()]
    if not rows:
        print("No visits")
    for v, label in rows:
        parking = "parking" if v.needs_parking else "-"
        print(f"{v.visit_date.isoformat()}  {label}  {parking}  {v.reason}")


async def cmd_reset(layer: DataLayer, args):
    if not args.yes:
        print("Refusing to clear all data without --yes")
        sys.exit(1)
    await layer.clear_all_data()
    print("All data cleared")


_COMMANDS = {
    "register": cmd_register,
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "add-property": cmd_add_property,
    "properties": cmd_properties,
    "schedule-visit": cmd_schedule_visit,
    "visits": cmd_visits,
    "reset": cmd_reset,
}


async def _run(args) -> int:
    try:
        layer = await open_data_layer()
    except PropVisitError as e:
        print(f"Error: {e.message}")
        return 1
    try:
        await _COMMANDS[args.command](layer, args)
    except PropVisitError as e:
        print(f"Error: {e.message}")
        return 1
    finally:
        await layer.close()
    return 0


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Property visit tracker CLI")
    subparsers = parser.add_subparsers(dest="command")

    # register
    rg = subparsers.add_parser("register", help="Create an account")
    rg.add_argument("--email", required=True)
    rg.add_argument("--name", required=True)
    rg.add_argument("--phone", default=None)
    rg.add_argument("--password", default="", help="Password (prompted if not given)")

    # login
    lg = subparsers.add_parser("login", help="Log in")
    lg.add_argument("--email", required=True)
    lg.add_argument("--password", default="", help="Password (prompted if not given)")

    subparsers.add_parser("logout", help="Log out")
    subparsers.add_parser("whoami", help="Show the logged-in user")

    # add-property
    ap = subparsers.add_parser("add-property", help="Add a property")
    ap.add_argument("--name", required=True)
    ap.add_argument("--address", required=True)
    ap.add_argument("--description", default=None)

    subparsers.add_parser("properties", help="List your properties")

    # schedule-visit
    sv = subparsers.add_parser("schedule-visit", help="Record a visit to a property")
    sv.add_argument("--property", required=True, help="Property id")
    sv.add_argument("--date", required=True, help="Visit date/time (ISO 8601)")
    sv.add_argument("--parking", action="store_true", help="Visitor needs parking")
    sv.add_argument("--reason", default="")

    # visits
    vs = subparsers.add_parser("visits", help="List your visits, newest first")
    vs.add_argument("--property", default=None, help="Only visits for this property id")

    # reset
    rs = subparsers.add_parser("reset", help="Delete all stored data")
    rs.add_argument("--yes", action="store_true", help="Confirm deletion")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
