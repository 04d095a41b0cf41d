"""
Command-Line Interface for the Progression System.

This module parses the command line and hands over to the dashboard.

COMMANDS:
---------
1. resync:         recompute the progress and delay level of every student
2. import-audits:  import the legacy code-review CSV export
3. pending:        show the pending review queue of a promotion
4. groups:         show the groups of a promotion or of one project

NOTE: Don't run this file directly. Run from the project root:
    python3 -m progression resync
"""

import argparse
import json
import logging
import sys

from . import __version__
from .data import Database, ProgressionAPIError
from .dashboard import ProgressionDashboard


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="progression",
        description="Zone01 student progression and code-review tooling",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--database", help="SQLAlchemy database URL (default: config)")

    sub = parser.add_subparsers(dest="command", required=True)

    resync = sub.add_parser("resync", help="recompute student progress from the API")
    resync.add_argument("--promo", help="event id or key of a single promotion")
    resync.add_argument("--strict", action="store_true",
                        help="report unknown expected projects as 'Inconnu'")
    resync.add_argument("--json", action="store_true", help="print the summary as JSON")

    imp = sub.add_parser("import-audits", help="import the legacy audit CSV")
    imp.add_argument("csv", help="path to the CSV export")
    imp.add_argument("--clear", action="store_true", help="delete every audit first")
    imp.add_argument("--json", action="store_true", help="print the result as JSON")

    pending = sub.add_parser("pending", help="pending review queue of a promotion")
    pending.add_argument("--promo", required=True, help="event id or key")

    groups = sub.add_parser("groups", help="groups of a promotion or of one project")
    groups.add_argument("--promo", required=True, help="event id or key")
    groups.add_argument("--project", help="project name (default: every finished group)")

    return parser


def main(argv=None) -> int:
    """
    Entry point of the `progression` console script.

    Returns:
        Process exit code: 0 on success, 1 when the run reported errors,
        2 on invalid input or an unreachable API
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    database = Database(args.database) if args.database else None
    dashboard = ProgressionDashboard(database=database, quiet=getattr(args, "json", False))

    try:
        if args.command == "resync":
            summary = dashboard.run_resync(args.promo, strict=args.strict)
            if args.json:
                print(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2))
            return 1 if summary.total_errors else 0

        if args.command == "import-audits":
            result = dashboard.run_import(args.csv, clear=args.clear)
            if args.json:
                print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
            return 1 if result.errors else 0

        if args.command == "pending":
            dashboard.show_pending(args.promo)
            return 0

        if args.command == "groups":
            dashboard.show_groups(args.promo, args.project)
            return 0
    except (ValueError, FileNotFoundError, ProgressionAPIError) as e:
        logging.getLogger("progression").error("%s", e)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
