"""
Intake tracker CLI demo. Run from project root: python -m intake_app
Builds a sample log, prints daily/weekly/monthly totals, and optionally saves a graph.
"""

import argparse
import sys
from datetime import date, timedelta

from intake_app.drinks import DrinkEntry, entries_from_preset
from intake_app.errors import ConflictError
from intake_app.graph import save_intake_graph
from intake_app.periods import LEGACY_MONTH_DAYS, summary_reports
from intake_app.persistence import DrinkRepository, JsonFileKeyValueStore
from intake_app.store import DrinkStore


def _add_demo_drinks(store: DrinkStore, today: date) -> None:
    store.add_many(
        entries_from_preset("beer", today, count=2)
        + [DrinkEntry.abstinence(today - timedelta(days=1))]
        + entries_from_preset("wine", today - timedelta(days=2), count=3)
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Alcohol intake tracker: log drinks and view totals")
    parser.add_argument("--data", type=str, metavar="FILE", help="Load and save drinks in FILE (JSON)")
    parser.add_argument("--graph", type=str, metavar="FILE", help="Save this month's graph to FILE (e.g. intake.png)")
    parser.add_argument("--demo", action="store_true", help="Add demo drinks (2 beers today, 3 wines two days ago)")
    parser.add_argument("--legacy-month", action="store_true", help="Divide monthly averages by 30")
    args = parser.parse_args(argv)

    if args.data:
        store = DrinkStore.open(DrinkRepository(JsonFileKeyValueStore(args.data)))
    else:
        store = DrinkStore()

    today = date.today()
    if args.demo or not args.data:
        try:
            _add_demo_drinks(store, today)
            print("Demo log: 2 beers today, no drink day yesterday, 3 wines two days ago")
        except ConflictError as exc:
            print(f"Demo drinks not added: {exc}", file=sys.stderr)
    if store.last_save_error is not None:
        print(f"Warning: drinks not saved: {store.last_save_error}", file=sys.stderr)

    print(f"Entries: {len(store)}")
    fixed = LEGACY_MONTH_DAYS if args.legacy_month else None
    for kind, report in summary_reports(store.list_all(), today, fixed_month_days=fixed).items():
        print(
            f"{kind.value.capitalize():8s} {report.start}..{report.end}: "
            f"{report.count} drinks, {report.total_grams:.1f} g, "
            f"{report.average_per_day:.1f} g/day, {report.severity.value}"
        )

    if args.graph:
        try:
            path = save_intake_graph(store, output_path=args.graph, month=today)
            print(f"Graph saved: {path}")
        except ImportError:
            print("matplotlib not installed. pip install matplotlib", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
