import argparse
import json
import logging
import sys
from pathlib import Path

from bookstore_sync import data_handler, settings, utils
from bookstore_sync.exceptions import SheetImportError
from bookstore_sync.ledger import set_daily_goal
from bookstore_sync.logger import setup_logger
from bookstore_sync.merge import low_stock
from bookstore_sync.pipelines.catalog import CatalogImportPipeline
from bookstore_sync.pipelines.sales import SalesImportPipeline
from bookstore_sync.schemas import ImportMode

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bookstore catalog and daily sales reconciliation."
    )
    parser.add_argument("--data-dir", type=Path, default=None, help="Collection store directory")
    parser.add_argument("--test", action="store_true", help="Skip the webhook post")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped rows")
    sub = parser.add_subparsers(dest="command", required=True)

    catalog = sub.add_parser("catalog", help="Import a catalog/price/synopsis sheet")
    catalog.add_argument("file", type=Path)

    sales = sub.add_parser("sales", help="Import a daily sales sheet")
    sales.add_argument("file", type=Path)
    sales.add_argument("--date", default=None, help="Sales day, YYYY-MM-DD (default: today)")
    sales.add_argument(
        "--mode",
        choices=[m.value for m in ImportMode],
        default=ImportMode.ADD.value,
        help="'replace' overwrites the day's total, 'add' accumulates",
    )

    goal = sub.add_parser("goal", help="Set the goals for a day")
    goal.add_argument("min_goal", type=float)
    goal.add_argument("super_goal", type=float)
    goal.add_argument("--date", default=None)

    export = sub.add_parser("export", help="Export the catalog to CSV")
    export.add_argument("--out", type=Path, default=None)

    sub.add_parser("low-stock", help="List titles about to run out")

    backup = sub.add_parser("backup", help="Dump every collection to one JSON file")
    backup.add_argument("file", type=Path)

    restore = sub.add_parser("restore", help="Replace every collection from a backup")
    restore.add_argument("file", type=Path)

    clear = sub.add_parser("clear-catalog", help="Delete every title from the catalog")
    clear.add_argument("--yes", action="store_true", required=True)

    return parser


def run_command(args: argparse.Namespace) -> int:
    store = data_handler.JsonFileStore(args.data_dir)

    if args.command == "catalog":
        CatalogImportPipeline(store, test_mode=args.test).run(args.file)

    elif args.command == "sales":
        SalesImportPipeline(
            store, target_date=args.date, mode=args.mode, test_mode=args.test
        ).run(args.file)

    elif args.command == "goal":
        day = args.date or utils.today_iso()
        ledger = set_daily_goal(data_handler.load_ledger(store), day, args.min_goal, args.super_goal)
        data_handler.save_ledger(store, ledger)
        logger.info(f"✅ Goals for {day}: min {args.min_goal:.2f} / super {args.super_goal:.2f}")

    elif args.command == "export":
        out = args.out or settings.OUTPUT_DIR / f"catalog_{utils.get_date_suffix_for_filename()}.csv"
        data_handler.export_catalog_csv(data_handler.load_catalog(store), out)

    elif args.command == "low-stock":
        items = low_stock(data_handler.load_catalog(store))
        if not items:
            logger.info("No titles below the stock threshold.")
        for item in items:
            logger.info(f"{item.isbn}  {item.display_title}  ({item.stock_count} un)")

    elif args.command == "backup":
        args.file.parent.mkdir(parents=True, exist_ok=True)
        with open(args.file, "w", encoding="utf-8") as f:
            json.dump(store.export_all(), f, ensure_ascii=False, indent=2)
        logger.info(f"✅ Backup saved to: {args.file}")

    elif args.command == "restore":
        with open(args.file, "r", encoding="utf-8") as f:
            store.import_all(json.load(f))
        logger.info(f"✅ Collections restored from: {args.file}")

    elif args.command == "clear-catalog":
        data_handler.clear_catalog(store)

    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(log_level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        return run_command(args)
    except SheetImportError as e:
        logger.error(f"❌ {e}")
        return 2
    except ValueError as e:
        logger.error(f"❌ Invalid input: {e}")
        return 1
    except OSError as e:
        logger.error(f"❌ Could not read or write {e.filename or 'file'}: {e.strerror or e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
