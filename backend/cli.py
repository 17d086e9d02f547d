"""
Command line access to the knowledge base.

Usage (from backend/):
    python -m cli list                          # every record, newest first
    python -m cli list --area sales -q leads    # filtered
    python -m cli show <id>                     # one record as Markdown
    python -m cli export csv                    # whole knowledge base
    python -m cli export markdown --ids a b     # selected records only
    python -m cli export json --out /tmp/kb     # custom output directory
"""

import argparse
import logging
import sys
from typing import List, Optional

from config import get_settings
from delivery import DirectorySink
from exporters import ExportFormat, record_to_markdown
from exporters.markdown_encoder import format_timestamp
from exporters.service import export
from knowledge import BusinessArea, SelectionTracker
from knowledge.storage import JsonFileStorage, SolutionStore

logger = logging.getLogger(__name__)


def cmd_list(store: SolutionStore, args: argparse.Namespace) -> int:
    area = BusinessArea(args.area) if args.area else None
    records = store.filter(area=area, query=args.query)
    if not records:
        print("No solutions match.")
        return 0
    for record in records:
        date = format_timestamp(record.timestamp)[:10]
        print(f"{record.id}  {date}  [{record.business_area.label}]  {record.company_type} / {record.niche}")
    print(f"\n{len(records)} solution(s)")
    return 0


def cmd_show(store: SolutionStore, args: argparse.Namespace) -> int:
    record = store.get(args.id)
    if record is None:
        print(f"Solution not found: {args.id}", file=sys.stderr)
        return 1
    print(record_to_markdown(record))
    return 0


def cmd_export(store: SolutionStore, args: argparse.Namespace) -> int:
    fmt = ExportFormat(args.format)
    selection = SelectionTracker()
    # Without explicit ids a Markdown export covers the whole knowledge base
    selection.select_all(args.ids or store.ids())

    sink = DirectorySink(args.out or get_settings().export_dir)
    file_name = export(fmt, store, selection, sink)
    if file_name is None:
        print("Nothing to export.", file=sys.stderr)
        return 1
    print(f"Exported {sink.directory / file_name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Business Problem Solver knowledge base",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--data-dir",
        help="Knowledge base directory (default: KNOWLEDGE_DATA_DIR or backend/data)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="List stored solutions")
    list_parser.add_argument(
        "--area", "-a",
        choices=[area.value for area in BusinessArea],
        help="Only solutions from this business area",
    )
    list_parser.add_argument("--query", "-q", help="Text to search for")
    list_parser.set_defaults(handler=cmd_list)

    show_parser = sub.add_parser("show", help="Print one solution as Markdown")
    show_parser.add_argument("id")
    show_parser.set_defaults(handler=cmd_show)

    export_parser = sub.add_parser("export", help="Export solutions to a file")
    export_parser.add_argument("format", choices=[fmt.value for fmt in ExportFormat])
    export_parser.add_argument(
        "--ids",
        nargs="+",
        help="Record ids to include in a Markdown export (default: all)",
    )
    export_parser.add_argument("--out", "-o", help="Output directory (default: EXPORT_DIR or ./exports)")
    export_parser.set_defaults(handler=cmd_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    store = SolutionStore(JsonFileStorage(args.data_dir or settings.data_dir))
    return args.handler(store, args)


if __name__ == "__main__":
    sys.exit(main())
