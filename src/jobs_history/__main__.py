"""CLI interface for browsing job execution history."""

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Optional

from . import JobsHistoryConfig, __version__
from .exceptions import JobsHistoryError
from .persistence.models import DateRange, ServiceFilter, TimePeriod
from .persistence.preferences import LocalStorage
from .service import HistoryFetcher, JobRunnerClient
from .ui.history_controller import HistoryController
from .ui.history_logic import format_duration, format_time_ago, is_my_job
from .ui.history_state import ViewStatus
from .ui.time_window_logic import period_label
from .utils.config_persistence import save_config_to_file


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobs-history",
        description="Show automation job execution history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    scope = parser.add_mutually_exclusive_group()
    scope.add_argument(
        "--all", dest="only_mine", action="store_false", default=None,
        help="Show runs from all users (remembered until --mine)",
    )
    scope.add_argument(
        "--mine", dest="only_mine", action="store_true", default=None,
        help="Show only my runs (default; remembered until --all)",
    )
    parser.add_argument(
        "--period",
        choices=[p.value for p in TimePeriod],
        help="Predefined time window (default: last stored, else last48h)",
    )
    parser.add_argument("--from", dest="from_date", type=_parse_date, help="Custom range start (YYYY-MM-DD, remembered until --clear-range or --period)")
    parser.add_argument("--to", dest="to_date", type=_parse_date, help="Custom range end (YYYY-MM-DD)")
    parser.add_argument(
        "--clear-range", action="store_true",
        help="Forget the remembered custom range",
    )
    parser.add_argument("--service", help="Show every run of one job name")
    parser.add_argument("--search", default="", help="Filter by job, user, status or build number")
    parser.add_argument("--page", type=int, default=1, help="Page to show (default: 1)")
    parser.add_argument(
        "--user", metavar="EMAIL",
        help="Mark runs triggered by EMAIL when showing all users "
             "(default: JOBS_HISTORY_USER_EMAIL)",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Show detailed progress"
    )
    parser.add_argument(
        "--save-config", action="store_true",
        help="Write the effective configuration to ~/.config/jobs_history/config.json and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def render(controller: HistoryController, current_user_email: Optional[str] = None) -> str:
    """Render the controller's current page as plain text.

    Rows triggered by ``current_user_email`` are marked with ``*`` while
    runs from all users are shown.
    """
    status = controller.view_status
    if status is ViewStatus.ERROR:
        return f"Failed to load executions: {controller.error}"
    if status is ViewStatus.EMPTY:
        return "No executions found"
    if status is ViewStatus.NO_MATCH:
        return "No jobs match your search"

    filters = controller.state.filters
    window = "custom range" if filters.has_custom_range else period_label(filters.time_period)
    only_mine = filters.effective_only_mine
    lines = [f"  {'STATUS':<10} {'JOB':<40} {'BUILD':>7} {'TRIGGERED BY':<24} {'UPDATED':<10} DURATION"]
    for record in controller.visible_records:
        lines.append(
            f"{'*' if is_my_job(record, current_user_email, only_mine) else ' '} "
            f"{record.status_text:<10} {record.job_name[:40]:<40} "
            f"{'#' + str(record.build_number):>7} {(record.triggered_by_name or 'unknown')[:24]:<24} "
            f"{format_time_ago(record.last_polled_at):<10} {format_duration(record.duration)}"
        )
    stats = controller.pagination
    lines.append("")
    lines.append(
        f"Page {stats.current_page} of {max(1, stats.total_pages)} "
        f"({stats.total_items} executions, {window}, {stats.mode.value} pagination)"
    )
    return "\n".join(lines)


async def run(args: argparse.Namespace, config: JobsHistoryConfig) -> int:
    storage = LocalStorage(config.preferences.path)
    async with JobRunnerClient(config.backend) as client:
        controller = HistoryController(HistoryFetcher(client), storage, config.history)
        controller.auto_sync = False
        try:
            if args.only_mine is not None:
                await controller.set_only_mine(args.only_mine)
            if args.period:
                await controller.set_time_period(TimePeriod(args.period))
            if args.clear_range:
                await controller.clear_date_range()
            if args.from_date or args.to_date:
                await controller.set_date_range(DateRange(args.from_date, args.to_date))
            if args.service:
                await controller.set_service_filter(ServiceFilter(args.service, args.service))
            if args.search:
                await controller.apply_search_term(args.search)
            await controller.start()
            controller.auto_sync = True
            if args.page > 1:
                await controller.go_to_page(args.page)

            print(render(controller, args.user or config.history.current_user_email))
            return 1 if controller.view_status is ViewStatus.ERROR else 0
        finally:
            await controller.close()


def main() -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()
    if args.clear_range and (args.from_date or args.to_date):
        parser.error("--clear-range cannot be combined with --from/--to")

    # Configure logging
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(levelname)s: %(message)s',
            stream=sys.stderr,
        )
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        config = JobsHistoryConfig.load()
        if args.save_config:
            path = save_config_to_file(config)
            print(f"Configuration saved to {path}")
            return 0
        return asyncio.run(run(args, config))
    except JobsHistoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
