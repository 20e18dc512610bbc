#!/usr/bin/env python3
"""
Unified CLI for maintenance tracking.

Commands:
  list           - Show every item with its projected maintenance status
  show           - Show details and estimation for one item
  add            - Register a new item
  update-reading - Record an observed reading
  adjust         - Set a manual correction on the projected reading
  edit           - Change an item's name, consumption rate or interval
  pin            - Pin or unpin an item
  delete         - Remove an item
"""

import argparse
import logging
import math
import sys
from datetime import datetime
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from logging_config import configure_logging
from models import (
    NEVER_DAYS,
    EstimationResult,
    InvalidItemError,
    Item,
    Status,
    YamlItemStore,
    apply_adjustment,
    calculate_estimation,
    edit_item,
    item_to_dict,
    new_item,
    progress_percent,
    project_current_reading,
    record_reading,
    sort_items,
    toggle_pin,
    validate_item,
)
from models.listing import SORT_METHODS
from models.timestamps import utcnow
from settings import get_settings

logger = logging.getLogger(__name__)

# =============================================================================
# Formatting helpers
# =============================================================================


def format_reading(value: Optional[float]) -> str:
    """Format a reading for display."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "-"
    return f"{value:,.0f}"


def format_days_left(days: Optional[int]) -> str:
    """Format days left for display (e.g., '3mo 15d', '14d' or 'never')."""
    if days is None:
        return "-"
    if days >= NEVER_DAYS:
        return "never"
    months = days // 30
    remaining_days = days % 30
    if months > 0:
        return f"{months}mo {remaining_days}d"
    return f"{days}d"


def format_date(moment: Optional[datetime]) -> str:
    return moment.date().isoformat() if moment is not None else "-"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def finite_float(value: str) -> float:
    """argparse type for numbers; rejects nan and infinities."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: '{value}'")
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"not a finite number: '{value}'")
    return number


def find_item(items: List[Item], ref: str) -> Optional[Item]:
    """Find an item by id, case-insensitive name, or unique id prefix."""
    for item in items:
        if str(item.id) == ref:
            return item
    lowered = ref.lower()
    for item in items:
        if str(item.name).lower() == lowered:
            return item
    prefixed = [item for item in items if item.id and str(item.id).startswith(ref)]
    if len(prefixed) == 1:
        return prefixed[0]
    return None


# =============================================================================
# List command
# =============================================================================


def make_items_table(items: List[Item], now: datetime) -> List[List[str]]:
    """Convert items to table rows, projecting each at the same instant."""
    rows = []
    for item in items:
        estimation = calculate_estimation(item, now)
        pin = "*" if item.is_pinned else ""
        rows.append(
            [
                f"{pin}{truncate(item.name, 24)}",
                format_reading(project_current_reading(item, now)),
                format_reading(estimation.next_maintenance_reading),
                format_days_left(estimation.days_left),
                format_date(estimation.estimated_date),
                estimation.status.value,
            ]
        )
    return rows


def cmd_list(args):
    """Show every item with its projected maintenance status."""
    store = YamlItemStore(args.items_file)
    now = utcnow()
    items = sort_items(store.list(), args.sort, now)

    print(f"Items: {len(items)} (sorted by {args.sort})")
    if args.status:
        wanted = Status(args.status)
        items = [i for i in items if calculate_estimation(i, now).status == wanted]
        print(f"Filter: {wanted.value.upper()} only ({len(items)} shown)")
    print()

    if not items:
        print("No items found.")
        return 0

    headers = ["Item", "Reading (est.)", "Next Due", "Left", "Due Date", "Status"]
    print(tabulate(make_items_table(items, now), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Show command
# =============================================================================


def describe_item(item: Item, estimation: EstimationResult, now: datetime) -> List[List[str]]:
    """Key/value rows describing one item."""
    rows = [
        ["Name", str(item.name)],
        ["Id", str(item.id)],
        ["Recorded reading", format_reading(item.current_reading)],
        ["Recorded at", str(item.updated_at or "-")],
        ["Consumption", f"{format_reading(item.consumption_rate)} / {item.consumption_period}"],
        ["Maintenance every", format_reading(item.maintenance_threshold)],
        ["Adjustment", format_reading(item.adjustment_offset)],
        ["Estimated reading", format_reading(project_current_reading(item, now))],
        ["Next maintenance at", format_reading(estimation.next_maintenance_reading)],
        ["Progress", f"{progress_percent(item, now):.0f}%"],
        ["Days left", format_days_left(estimation.days_left)],
        ["Weeks left", f"{estimation.weeks_left:.1f}"],
        ["Estimated date", format_date(estimation.estimated_date)],
        ["Status", estimation.status.value.upper()],
    ]
    if item.is_pinned:
        rows.append(["Pinned", "yes"])
    return rows


def cmd_show(args):
    """Show details and estimation for one item."""
    store = YamlItemStore(args.items_file)
    item = find_item(store.list(), args.item)
    if item is None:
        print(f"Error: Unknown item '{args.item}'")
        return 1

    now = utcnow()
    estimation = calculate_estimation(item, now)
    print(tabulate(describe_item(item, estimation, now), tablefmt="plain"))
    return 0


# =============================================================================
# Add command
# =============================================================================


def cmd_add(args):
    """Register a new item."""
    if args.option == "custom" and args.threshold is None:
        print("Error: --threshold is required with --option custom")
        return 1

    item = new_item(
        name=args.name,
        current_reading=args.reading,
        consumption_rate=args.rate,
        consumption_period=args.period,
        maintenance_option=args.option,
        maintenance_threshold=args.threshold,
    )
    errors = validate_item(item_to_dict(item))
    if errors:
        print("Error: Invalid item")
        for error in errors:
            print(f"  {error}")
        return 1

    print(f"Adding item to {args.items_file}:")
    print(f"  Name:        {item.name}")
    print(f"  Reading:     {format_reading(item.current_reading)}")
    print(f"  Consumption: {format_reading(item.consumption_rate)} / {item.consumption_period}")
    print(f"  Maintenance: every {format_reading(item.maintenance_threshold)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    YamlItemStore(args.items_file).put(item)
    print(f"Item saved ({item.id}).")
    return 0


# =============================================================================
# Update reading / adjust / pin / delete commands
# =============================================================================


def _load_item(args):
    store = YamlItemStore(args.items_file)
    item = find_item(store.list(), args.item)
    if item is None:
        print(f"Error: Unknown item '{args.item}'")
    return store, item


def cmd_update_reading(args):
    """Record an observed reading."""
    if args.reading < 0:
        print("Error: reading must not be negative")
        return 1
    store, item = _load_item(args)
    if item is None:
        return 1

    now = utcnow()
    print(f"Item: {item.name}")
    print(f"Estimated reading: {format_reading(project_current_reading(item, now))}")
    print(f"New reading:       {format_reading(args.reading)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    store.put(record_reading(item, args.reading, now))
    print("Reading updated.")
    return 0


def cmd_adjust(args):
    """Set a manual correction on the projected reading."""
    store, item = _load_item(args)
    if item is None:
        return 1

    now = utcnow()
    adjusted = apply_adjustment(item, args.offset)
    print(f"Item: {item.name}")
    print(f"Estimated reading: {format_reading(project_current_reading(item, now))}")
    print(f"Adjusted reading:  {format_reading(project_current_reading(adjusted, now))}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    store.put(adjusted)
    print("Adjustment saved.")
    return 0


def cmd_edit(args):
    """Change an item's name, consumption rate or maintenance interval."""
    changes = {
        "name": args.name,
        "consumption_rate": args.rate,
        "consumption_period": args.period,
        "maintenance_threshold": args.threshold,
        "maintenance_option": args.option,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        print("Error: Nothing to change")
        return 1

    store, item = _load_item(args)
    if item is None:
        return 1

    try:
        edited = edit_item(item, **changes)
    except InvalidItemError as e:
        print("Error: Invalid item")
        for error in e.errors:
            print(f"  {error}")
        return 1

    now = utcnow()
    before = calculate_estimation(item, now)
    after = calculate_estimation(edited, now)
    print(f"Editing item: {item.name}")
    print(f"  Name:        {edited.name}")
    print(f"  Consumption: {format_reading(edited.consumption_rate)} / {edited.consumption_period}")
    print(f"  Maintenance: every {format_reading(edited.maintenance_threshold)}")
    print(f"  Days left:   {format_days_left(before.days_left)} -> {format_days_left(after.days_left)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    store.put(edited)
    print("Item updated.")
    return 0


def cmd_pin(args):
    """Pin or unpin an item."""
    store, item = _load_item(args)
    if item is None:
        return 1

    updated = store.put(toggle_pin(item))
    print(f"{'Pinned' if updated.is_pinned else 'Unpinned'}: {item.name}")
    return 0


def cmd_delete(args):
    """Remove an item."""
    store, item = _load_item(args)
    if item is None:
        return 1

    print(f"Deleting item: {item.name} ({item.id})")
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    store.delete(item.id)
    print("Item deleted.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s items.yaml list
  %(prog)s items.yaml list --sort remaining --status critical
  %(prog)s items.yaml add "Family car" --reading 10000 --rate 700 \\
      --period weekly --option 5000
  %(prog)s items.yaml show "family car"
  %(prog)s items.yaml update-reading "family car" 10850
  %(prog)s items.yaml adjust "family car" -120
  %(prog)s items.yaml edit "family car" --rate 800 --option 15000
""",
    )
    parser.add_argument(
        "items_file",
        type=Path,
        help="Path to items YAML file",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # List subcommand
    list_parser = subparsers.add_parser(
        "list", help="Show every item with its projected maintenance status"
    )
    list_parser.add_argument(
        "--sort",
        choices=SORT_METHODS,
        default=settings.items_sort,
        help=f"Sort order, pinned items first (default: {settings.items_sort})",
    )
    list_parser.add_argument(
        "--status",
        choices=[s.value for s in Status],
        help="Only show items with this status",
    )

    # Show subcommand
    show_parser = subparsers.add_parser("show", help="Show details for one item")
    show_parser.add_argument("item", type=str, help="Item id, id prefix, or name")

    # Add subcommand
    add_parser = subparsers.add_parser("add", help="Register a new item")
    add_parser.add_argument("name", type=str, help="Item name (e.g., 'Family car')")
    add_parser.add_argument(
        "--reading", type=finite_float, required=True, help="Current reading"
    )
    add_parser.add_argument(
        "--rate", type=finite_float, required=True, help="Consumption per period"
    )
    add_parser.add_argument(
        "--period",
        choices=["daily", "weekly", "monthly"],
        default="weekly",
        help="Period the rate is expressed over (default: weekly)",
    )
    add_parser.add_argument(
        "--option",
        choices=["5000", "10000", "15000", "custom"],
        default="10000",
        help="Maintenance interval preset (default: 10000)",
    )
    add_parser.add_argument(
        "--threshold",
        type=finite_float,
        help="Maintenance interval, required with --option custom",
    )
    add_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    # Update reading subcommand
    reading_parser = subparsers.add_parser(
        "update-reading", help="Record an observed reading"
    )
    reading_parser.add_argument("item", type=str, help="Item id, id prefix, or name")
    reading_parser.add_argument("reading", type=finite_float, help="Observed reading")
    reading_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without saving",
    )

    # Adjust subcommand
    adjust_parser = subparsers.add_parser(
        "adjust", help="Set a manual correction on the projected reading"
    )
    adjust_parser.add_argument("item", type=str, help="Item id, id prefix, or name")
    adjust_parser.add_argument(
        "offset", type=finite_float, help="Signed correction added to the projection"
    )
    adjust_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without saving",
    )

    # Edit subcommand
    edit_parser = subparsers.add_parser(
        "edit", help="Change an item's name, consumption rate or interval"
    )
    edit_parser.add_argument("item", type=str, help="Item id, id prefix, or name")
    edit_parser.add_argument("--name", type=str, help="New name")
    edit_parser.add_argument("--rate", type=finite_float, help="Consumption per period")
    edit_parser.add_argument(
        "--period",
        choices=["daily", "weekly", "monthly"],
        help="Period the rate is expressed over",
    )
    edit_parser.add_argument(
        "--option",
        choices=["5000", "10000", "15000", "custom"],
        help="Maintenance interval preset",
    )
    edit_parser.add_argument(
        "--threshold", type=finite_float, help="Maintenance interval"
    )
    edit_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be changed without saving",
    )

    # Pin subcommand
    pin_parser = subparsers.add_parser("pin", help="Pin or unpin an item")
    pin_parser.add_argument("item", type=str, help="Item id, id prefix, or name")

    # Delete subcommand
    delete_parser = subparsers.add_parser("delete", help="Remove an item")
    delete_parser.add_argument("item", type=str, help="Item id, id prefix, or name")
    delete_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without saving",
    )

    return parser


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "add": cmd_add,
    "update-reading": cmd_update_reading,
    "adjust": cmd_adjust,
    "edit": cmd_edit,
    "pin": cmd_pin,
    "delete": cmd_delete,
}


def main(argv=None):
    configure_logging()
    args = build_parser().parse_args(argv)

    # Only add may create the file
    if args.command != "add" and not args.items_file.exists():
        print(f"Error: File not found: {args.items_file}")
        return 1

    try:
        return COMMANDS[args.command](args)
    except ValueError as e:
        logger.error("Cannot read %s: %s", args.items_file, e)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
