"""
Run a reconciliation from the command line.

Prints the summary and the mismatching records.

Usage:
    python scripts/run_reconciliation.py
    python scripts/run_reconciliation.py --config-id <uuid> --mismatches-only
    python scripts/run_reconciliation.py --search claims --json
"""

import argparse
import os
import sys

# Allow imports from backend/ when running as a script
_backend_dir = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, _backend_dir)

from dotenv import load_dotenv
load_dotenv(os.path.join(_backend_dir, ".env"))

from models.reconciliation import ReconciliationRecord, ReconciliationReport
from services.reconciliation_engine import filter_records
from services.reconciliation_service import get_reconciliation_service
from exceptions import AppError


def _flag(value: bool) -> str:
    return "✓" if value else "✗"


def format_record(record: ReconciliationRecord) -> str:
    """One line per record: flags, source item, target item, expected placement."""
    source = record.source_item
    target = record.target_item
    source_label = f"{source.hierarchy_level.value} '{source.name}'" if source else "(missing source)"
    expected_parent = record.expected_parent.id if record.expected_parent else "-"
    return (
        f"  type {_flag(record.type_match)}  parent {_flag(record.parent_match)}  "
        f"location {_flag(record.location_match)}  "
        f"{source_label} -> #{target.id} {target.type} '{target.name}'\n"
        f"      expected: {record.expected_type or '-'} under {expected_parent} "
        f"at {record.expected_location or '-'}\n"
        f"      observed: {target.type or '-'} under {target.parent_id or '-'} "
        f"at {target.location or '-'}"
    )


def print_report(report: ReconciliationReport, records: list[ReconciliationRecord]) -> None:
    summary = report.summary

    print("=" * 60)
    print(f"  RECONCILIATION: {report.config_name or 'built-in defaults'}")
    print("=" * 60)
    print(f"  Total:      {summary.total_count}")
    print(f"  Full match: {summary.full_match_count}")
    print(f"  Partial:    {summary.partial_count}")
    print(f"  No match:   {summary.no_match_count}")
    print(f"  Type / parent / location matches: "
          f"{summary.type_match_count} / {summary.parent_match_count} / {summary.location_match_count}")
    if summary.orphaned_count:
        print(f"  Missing source items: {summary.orphaned_count}")
    print()

    for level, count in summary.by_level.items():
        print(f"  {level:<12} {count}")
    print()

    mismatches = [record for record in records if not record.full_match]
    if not mismatches:
        print("  No mismatches.")
        return

    print(f"  Mismatches ({len(mismatches)}):")
    for record in mismatches:
        print(format_record(record))


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Reconcile work items against the hierarchy mapping."
    )
    parser.add_argument(
        "--config-id",
        default=None,
        help="Mapping configuration id (default: first stored configuration)",
    )
    parser.add_argument(
        "--mismatches-only",
        action="store_true",
        help="Only include records that are not a full match",
    )
    parser.add_argument(
        "--search",
        default=None,
        help="Case-insensitive search over source/target names and ids",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )

    args = parser.parse_args(argv)

    try:
        report = get_reconciliation_service().run(config_id=args.config_id)
    except AppError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 1

    records = filter_records(
        report.records,
        mismatches_only=args.mismatches_only,
        search=args.search,
    )

    if args.json:
        print(report.model_copy(update={"records": records}).model_dump_json(indent=2))
    else:
        print_report(report, records)

    return 0


if __name__ == "__main__":
    sys.exit(main())
