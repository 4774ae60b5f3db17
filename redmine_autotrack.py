#!/usr/bin/env python3
"""
Redmine Daily Time Tracking Automation
======================================

Fills up the day's timesheet on a Redmine server.

Features:
- Reads the hours you already tracked for the target date
- Spreads the missing hours across the issues assigned to you
- Creates one time entry per issue, submitted in parallel
- Dry-run mode to preview the allocation without writing anything
- Optional JSON config file with an interactive setup wizard

Usage:
  python redmine_autotrack.py --host redmine.example.com --apikey KEY
  python redmine_autotrack.py --dry --today 2026-02-01
  python redmine_autotrack.py --setup
"""

import sys
import json
import math
import logging
import argparse
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import requests

# ============================================================================
# CONFIGURATION
# ============================================================================

SCRIPT_DIR = Path(__file__).parent
CONFIG_FILE = SCRIPT_DIR / "config.json"

DATE_FORMAT = '%Y-%m-%d'
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

DEFAULT_WORK_HOURS = 8.0
# Redmine activity "Development"
DEFAULT_ACTIVITY_ID = 9
# Smallest billable unit, in hours. Must divide 1 evenly.
GRANULARITY = 0.1
PAGE_SIZE = 100
REQUEST_TIMEOUT = 30
MAX_WORKERS = 4

# Absorbs binary float error so an exact share is not floored one unit low
_FLOOR_EPSILON = 1e-9

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False, logfile: Optional[str] = None):
    """Log to stdout and, optionally, append to a log file."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if logfile:
        handlers.append(
            logging.FileHandler(logfile, mode='a', encoding='utf-8')
        )
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


# ============================================================================
# ERRORS
# ============================================================================

class AutotrackError(Exception):
    """Base class for all errors raised by this tool."""


class ConfigError(AutotrackError):
    """Invalid or missing configuration. Raised before any network call."""


class RedmineError(AutotrackError):
    """The server answered with a payload we cannot use."""


class NoCandidatesError(AutotrackError, ValueError):
    """There are hours to allocate but no issues to put them on."""


# ============================================================================
# DATA MODEL
# ============================================================================

def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string, raising ConfigError when malformed."""
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except (ValueError, AttributeError):
        raise ConfigError(
            f"Invalid date '{value}'. Expected format is YYYY-MM-DD."
        )


def _name_of(ref) -> Optional[str]:
    if isinstance(ref, dict):
        return ref.get('name')
    return None


@dataclass(frozen=True)
class WorkItem:
    """An issue assigned to the current user. Only `id` drives allocation."""
    id: int
    subject: str = ''
    project: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    raw: Dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data: Dict) -> 'WorkItem':
        return cls(
            id=int(data['id']),
            subject=data.get('subject') or '',
            project=_name_of(data.get('project')),
            status=_name_of(data.get('status')),
            assigned_to=_name_of(data.get('assigned_to')),
            raw=data
        )


@dataclass(frozen=True)
class TimeRecord:
    """A time entry already stored on the server."""
    id: int
    issue_id: Optional[int]
    spent_on: date
    hours: float

    @classmethod
    def from_api(cls, data: Dict) -> 'TimeRecord':
        issue = data.get('issue') or {}
        hours = float(data['hours'])
        if hours < 0:
            raise ValueError(f"negative hours {hours}")
        return cls(
            id=int(data['id']),
            issue_id=int(issue['id']) if issue.get('id') is not None else None,
            spent_on=datetime.strptime(data['spent_on'], DATE_FORMAT).date(),
            hours=hours
        )


@dataclass(frozen=True)
class Settings:
    """Everything one run needs. Built once in main() and never mutated."""
    host: str
    api_key: str
    today: date
    work_hours: float = DEFAULT_WORK_HOURS
    dry_run: bool = False
    debug: bool = False
    activity_id: int = DEFAULT_ACTIVITY_ID
    strict_ledger: bool = False
    max_workers: int = MAX_WORKERS
    timeout: float = REQUEST_TIMEOUT


# ============================================================================
# CONFIGURATION MANAGER
# ============================================================================

class ConfigManager:
    """Loads and saves the optional JSON config file."""

    def __init__(self, config_path: Path = CONFIG_FILE):
        self.config_path = Path(config_path)

    def load_config(self) -> Dict:
        """Load configuration from file. A missing file is an empty config."""
        if not self.config_path.exists():
            logger.debug(f"No configuration file at {self.config_path}")
            return {}

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(
                f"Cannot read configuration {self.config_path}: {e}"
            )
        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration {self.config_path} must be a JSON object"
            )
        logger.info(f"Configuration loaded from {self.config_path}")
        return config

    def save_config(self, config: Dict):
        """Save configuration to file."""
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2)
        logger.info(f"Configuration saved to {self.config_path}")

    def setup_wizard(self, input_func: Callable[[str], str] = input) -> Dict:
        """Interactive setup wizard for first-time configuration."""
        current = self.load_config()
        redmine = _section(current, 'redmine')
        schedule = _section(current, 'schedule')

        print("\n" + "=" * 60)
        print("REDMINE AUTOTRACK - SETUP")
        print("=" * 60)
        print("\nPress Enter to keep the value shown in brackets.\n")

        def ask(prompt: str, default) -> str:
            shown = f" [{default}]" if default not in (None, '') else ''
            answer = input_func(f"{prompt}{shown}: ").strip()
            return answer or ('' if default is None else str(default))

        host = ask("Redmine host (e.g. redmine.example.com)",
                   redmine.get('host'))
        api_key = ask("API key (My account > API access key)",
                      redmine.get('api_key'))
        hours = ask("Daily work hours",
                    schedule.get('daily_hours', DEFAULT_WORK_HOURS))
        activity = ask("Time entry activity id",
                       redmine.get('activity_id', DEFAULT_ACTIVITY_ID))

        if not host or not api_key:
            raise ConfigError("Host and API key are required")
        try:
            daily_hours = float(hours)
            activity_id = int(activity)
        except ValueError as e:
            raise ConfigError(f"Invalid number: {e}")

        config = dict(current)
        config['redmine'] = {
            'host': host,
            'api_key': api_key,
            'activity_id': activity_id
        }
        config['schedule'] = {'daily_hours': daily_hours}
        self.save_config(config)
        print(f"\n[OK] Configuration saved to {self.config_path}")
        return config


def _section(config: Dict, name: str) -> Dict:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a JSON object")
    return section


def build_settings(args: argparse.Namespace, config: Dict) -> Settings:
    """
    Merge CLI arguments over the config file and validate the result.

    Raises:
        ConfigError: on missing credentials or malformed values
    """
    redmine = _section(config, 'redmine')
    schedule = _section(config, 'schedule')

    host = args.host or redmine.get('host') or ''
    api_key = args.apikey or redmine.get('api_key') or ''
    if not isinstance(host, str) or not isinstance(api_key, str):
        raise ConfigError("Redmine host and API key must be strings")
    if not host.strip():
        raise ConfigError(
            "Redmine host is not configured. Use --host or run --setup."
        )
    if not api_key.strip():
        raise ConfigError(
            "Redmine API key is not configured. Use --apikey or run --setup."
        )

    today = parse_date(args.today) if args.today else date.today()

    try:
        work_hours = float(
            args.hours if args.hours is not None
            else schedule.get('daily_hours', DEFAULT_WORK_HOURS)
        )
        activity_id = int(
            args.activity_id if args.activity_id is not None
            else redmine.get('activity_id', DEFAULT_ACTIVITY_ID)
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}")

    if not math.isfinite(work_hours) or work_hours <= 0:
        raise ConfigError(f"Work hours must be positive, got {work_hours}")
    if args.workers < 1:
        raise ConfigError(f"Workers must be at least 1, got {args.workers}")

    return Settings(
        host=host.strip(),
        api_key=api_key.strip(),
        today=today,
        work_hours=work_hours,
        dry_run=args.dry,
        debug=args.debug,
        activity_id=activity_id,
        strict_ledger=args.strict_ledger,
        max_workers=args.workers,
    )


# ============================================================================
# REDMINE API CLIENT
# ============================================================================

class RedmineClient:
    """Handles Redmine REST API interactions.

    Read calls go through one shared session. Writes may run on several
    threads at once, so each thread gets its own session.
    """

    def __init__(self, host: str, api_key: str,
                 timeout: float = REQUEST_TIMEOUT,
                 session_factory: Callable[[], requests.Session] = requests.Session):
        self.base_url = f"https://{host.strip().rstrip('/')}"
        self.api_key = api_key
        self.timeout = timeout
        self._session_factory = session_factory
        self._local = threading.local()
        self.session = self._new_session()

    def _new_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({
            'Content-Type': 'application/json',
            'X-Redmine-API-Key': self.api_key
        })
        return session

    def _thread_session(self) -> requests.Session:
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._new_session()
            self._local.session = session
        return session

    def _get_list(self, path: str, params: Dict, list_field: str) -> List[Dict]:
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url} {params}")

        query = dict(params)
        query['key'] = self.api_key
        response = self.session.get(url, params=query, timeout=self.timeout)
        response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as e:
            raise RedmineError(f"Malformed JSON from {path}: {e}")

        if not isinstance(payload, dict) or not isinstance(
                payload.get(list_field), list):
            raise RedmineError(f"Response from {path} has no '{list_field}' list")
        return payload[list_field]

    def get_my_issues(self) -> List[WorkItem]:
        """
        Fetch open issues assigned to the current user.

        Returns:
            WorkItems in the order the server returned them
        """
        raw_issues = self._get_list(
            '/issues.json',
            {'assigned_to_id': 'me', 'limit': PAGE_SIZE},
            'issues'
        )
        try:
            issues = [WorkItem.from_api(i) for i in raw_issues]
        except (KeyError, TypeError, ValueError) as e:
            raise RedmineError(f"Malformed issue in response: {e!r}")

        logger.info(f"Found {len(issues)} issues assigned to current user")
        return issues

    def get_my_time_entries(self) -> List[TimeRecord]:
        """
        Fetch the current user's most recent time entries, newest first.

        Returns:
            Up to PAGE_SIZE TimeRecords, not filtered by date. Entries that
            cannot be parsed are skipped.
        """
        raw_entries = self._get_list(
            '/time_entries.json',
            {'user_id': 'me', 'sort': 'spent_on:desc', 'limit': PAGE_SIZE},
            'time_entries'
        )
        entries = []
        for raw in raw_entries:
            try:
                entries.append(TimeRecord.from_api(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed time entry {raw!r}: {e!r}")

        logger.info(f"Fetched {len(entries)} time entries from Redmine")
        return entries

    def create_time_entry(self, issue_id: int, spent_on: date,
                          hours: float, activity_id: int):
        """
        Create a time entry on an issue.

        Args:
            issue_id: Redmine issue id
            spent_on: Day the time is booked on
            hours: Hours to book
            activity_id: Redmine time entry activity

        Raises:
            requests.exceptions.RequestException: on transport errors or
                a non-2xx answer
        """
        url = f"{self.base_url}/time_entries.json"
        payload = {
            'time_entry': {
                'issue_id': issue_id,
                'spent_on': spent_on.strftime(DATE_FORMAT),
                'hours': hours,
                'activity_id': activity_id
            }
        }

        response = self._thread_session().post(
            url, params={'key': self.api_key}, json=payload,
            timeout=self.timeout
        )
        logger.debug(
            f"POST {url} {payload} -> {response.status_code}: {response.text}"
        )
        response.raise_for_status()


# ============================================================================
# ALLOCATOR
# ============================================================================

@dataclass(frozen=True)
class Allocation:
    issue_id: int
    hours: float
    subject: str = ''


@dataclass(frozen=True)
class AllocationPlan:
    """Per-issue hours for one run. `total` equals `deficit`."""
    deficit: float
    raw_share: float
    rounded_share: float
    remainder: float
    entries: Tuple[Allocation, ...]

    @property
    def total(self) -> float:
        return sum(entry.hours for entry in self.entries)


def compute_deficit(target: float, tracked: float) -> float:
    return target - tracked


def _remainder_index(items: Sequence[WorkItem]) -> int:
    """Tie-break: the first issue in server order absorbs the remainder.

    This is a simple order-dependent rule, not a fairness guarantee.
    """
    return 0


def allocate(target: float, tracked: float, items: Sequence[WorkItem],
             granularity: float = GRANULARITY) -> AllocationPlan:
    """
    Split the missing hours evenly across `items`.

    Every issue gets the even share rounded down to `granularity`; what the
    rounding leaves over goes to the issue picked by _remainder_index().

    Raises:
        ValueError: if nothing is missing (tracked >= target)
        NoCandidatesError: if `items` is empty
    """
    deficit = compute_deficit(target, tracked)
    if deficit <= 0:
        raise ValueError(
            f"Nothing to allocate: {tracked}h tracked, target {target}h"
        )
    count = len(items)
    if count == 0:
        raise NoCandidatesError(
            f"No candidate work items for {deficit:.2f} missing hours"
        )

    units = round(1 / granularity)
    raw_share = deficit / count
    steps = math.floor(raw_share * units + _FLOOR_EPSILON)
    rounded_share = steps / units
    remainder = round(deficit - rounded_share * count, 10)
    if remainder < 0:
        # epsilon pushed the share one unit too high
        rounded_share = (steps - 1) / units
        remainder = round(deficit - rounded_share * count, 10)
    if remainder == 0:
        remainder = 0.0

    lucky = _remainder_index(items)
    entries = tuple(
        Allocation(
            issue_id=item.id,
            hours=(round(rounded_share + remainder, 10)
                   if index == lucky else rounded_share),
            subject=item.subject
        )
        for index, item in enumerate(items)
    )
    return AllocationPlan(
        deficit=deficit,
        raw_share=raw_share,
        rounded_share=rounded_share,
        remainder=remainder,
        entries=entries
    )


# ============================================================================
# AUTOMATION ENGINE
# ============================================================================

STATUS_COMPLETE = 'complete'
STATUS_PARTIAL = 'partial'
STATUS_ALREADY_TRACKED = 'already_tracked'
STATUS_NO_CANDIDATES = 'no_candidates'
STATUS_ISSUES_UNAVAILABLE = 'issues_unavailable'
STATUS_LEDGER_UNAVAILABLE = 'ledger_unavailable'

_FAILED_STATUSES = {
    STATUS_PARTIAL, STATUS_ISSUES_UNAVAILABLE, STATUS_LEDGER_UNAVAILABLE
}

REQUEST_ERRORS = (requests.exceptions.RequestException, RedmineError)


@dataclass(frozen=True)
class SubmissionResult:
    issue_id: int
    hours: float
    ok: bool
    error: Optional[str] = None
    dry_run: bool = False
    skipped: bool = False


@dataclass
class SyncResult:
    """Outcome of one sync run."""
    target_date: date
    tracked: float
    status: str
    plan: Optional[AllocationPlan] = None
    results: List[SubmissionResult] = field(default_factory=list)

    @property
    def failures(self) -> List[SubmissionResult]:
        return [r for r in self.results if not r.ok]

    @property
    def submitted_hours(self) -> float:
        return sum(
            r.hours for r in self.results
            if r.ok and not r.dry_run and not r.skipped
        )

    @property
    def exit_code(self) -> int:
        return 1 if self.status in _FAILED_STATUSES else 0


class TimeTrackingAutomation:
    """Main automation engine."""

    def __init__(self, settings: Settings, client: Optional[RedmineClient] = None):
        self.settings = settings
        self.client = client or RedmineClient(
            settings.host, settings.api_key, timeout=settings.timeout
        )

    def get_tracked_hours(self) -> float:
        """Sum the hours already booked on the target date."""
        entries = self.client.get_my_time_entries()
        return sum(
            e.hours for e in entries if e.spent_on == self.settings.today
        )

    def sync_daily(self) -> SyncResult:
        """
        Fill the target date up to the configured work hours.

        Reads the ledger, and only when hours are missing fetches the
        assigned issues, allocates and submits.
        """
        target_date = self.settings.today
        target = self.settings.work_hours
        now_ts = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        mode = " [DRY RUN]" if self.settings.dry_run else ""
        print(f"\n{'=' * 60}")
        print(f"REDMINE DAILY SYNC - {target_date}{mode} (started {now_ts})")
        print(f"{'=' * 60}\n")
        logger.info(f"Starting daily sync for {target_date}")

        try:
            tracked = self.get_tracked_hours()
        except REQUEST_ERRORS as e:
            if self.settings.strict_ledger:
                logger.error(f"Error fetching time entries, aborting: {e}")
                print("[FAIL] Could not read tracked hours; nothing submitted")
                return SyncResult(target_date, 0.0, STATUS_LEDGER_UNAVAILABLE)
            logger.error(
                f"Error fetching time entries, assuming 0h tracked: {e}"
            )
            tracked = 0.0

        logger.info(f"Tracked on {target_date}: {tracked:.2f}h")
        print(f"Already tracked: {tracked:.2f}h / {target}h")

        if tracked >= target:
            print(
                f"[OK] Tracked hours meet/exceed daily target ({target}h). "
                f"No additional logging needed."
            )
            return SyncResult(target_date, tracked, STATUS_ALREADY_TRACKED)

        try:
            issues = self.client.get_my_issues()
        except REQUEST_ERRORS as e:
            logger.error(f"Error fetching assigned issues: {e}")
            print("[FAIL] Could not read assigned issues; nothing submitted")
            return SyncResult(target_date, tracked, STATUS_ISSUES_UNAVAILABLE)

        if not issues:
            logger.warning(
                f"No candidate work items for "
                f"{compute_deficit(target, tracked):.2f} missing hours"
            )
            print("[!] No issues assigned to you. Nothing to track.")
            return SyncResult(target_date, tracked, STATUS_NO_CANDIDATES)

        plan = allocate(target, tracked, issues)
        self._report_plan(plan)

        results = self.submit_plan(plan)
        failed = [r for r in results if not r.ok]
        status = STATUS_PARTIAL if failed else STATUS_COMPLETE
        result = SyncResult(target_date, tracked, status, plan, results)
        self._print_summary(result)
        return result

    def _report_plan(self, plan: AllocationPlan):
        print(f"Found {len(plan.entries)} assigned issue(s):")
        for entry in plan.entries:
            print(f"  - #{entry.issue_id}: {entry.subject}")
        print(
            f"\n{plan.deficit:.2f}h / {len(plan.entries)} issues = "
            f"{plan.rounded_share:.2f}h each "
            f"(+{plan.remainder:.2f}h on #{plan.entries[0].issue_id})\n"
        )
        logger.info(
            f"Missing hours: {plan.deficit} Issues: {len(plan.entries)} "
            f"Time per issue: {plan.raw_share} (rounded: {plan.rounded_share}) "
            f"Extra time: {plan.remainder} To track: {plan.total}"
        )

    def submit_plan(self, plan: AllocationPlan) -> List[SubmissionResult]:
        """
        Create one time entry per allocation.

        Submissions are independent: a failure is reported and the others
        still go out. All in-flight requests finish before this returns.

        Returns:
            One SubmissionResult per plan entry, in plan order
        """
        results: Dict[int, SubmissionResult] = {}
        pending = []
        for index, entry in enumerate(plan.entries):
            if entry.hours <= 0:
                print(f"  [SKIP] #{entry.issue_id}: 0h allocated")
                results[index] = SubmissionResult(
                    entry.issue_id, entry.hours, ok=True, skipped=True
                )
            elif self.settings.dry_run:
                print(f"  [DRY] Would log {entry.hours:.2f}h on #{entry.issue_id}")
                results[index] = SubmissionResult(
                    entry.issue_id, entry.hours, ok=True, dry_run=True
                )
            else:
                pending.append((index, entry))

        if pending:
            workers = min(self.settings.max_workers, len(pending))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._submit_entry, entry): index
                    for index, entry in pending
                }
                for future in as_completed(futures):
                    results[futures[future]] = future.result()

        return [results[index] for index in range(len(plan.entries))]

    def _submit_entry(self, entry: Allocation) -> SubmissionResult:
        try:
            self.client.create_time_entry(
                issue_id=entry.issue_id,
                spent_on=self.settings.today,
                hours=entry.hours,
                activity_id=self.settings.activity_id
            )
        except REQUEST_ERRORS as e:
            logger.error(f"Error creating time entry for #{entry.issue_id}: {e}")
            print(f"  [FAIL] #{entry.issue_id} ({entry.hours:.2f}h): {e}")
            return SubmissionResult(
                entry.issue_id, entry.hours, ok=False, error=str(e)
            )

        logger.info(
            f"Created time entry: #{entry.issue_id} - {entry.hours}h "
            f"on {self.settings.today}"
        )
        print(f"  [OK] Logged {entry.hours:.2f}h on #{entry.issue_id}")
        return SubmissionResult(entry.issue_id, entry.hours, ok=True)

    def _print_summary(self, result: SyncResult):
        done_ts = datetime.now().strftime('%H:%M:%S')
        target = self.settings.work_hours
        print(f"\n{'=' * 60}")
        if result.failures:
            print(f"[!] SYNC FINISHED WITH ERRORS ({done_ts})")
        else:
            print(f"[OK] SYNC COMPLETE ({done_ts})")
        print(f"{'=' * 60}")
        print(f"Tracked before: {result.tracked:.2f}h")
        print(f"Deficit: {result.plan.deficit:.2f}h")
        print(f"Allocated: {result.plan.total:.2f}h "
              f"across {len(result.plan.entries)} issue(s)")
        if self.settings.dry_run:
            print("Status: [DRY] Nothing submitted")
        elif result.failures:
            print(f"Submitted: {result.submitted_hours:.2f}h")
            print(f"Status: [!] {len(result.failures)} submission(s) failed")
        else:
            total = result.tracked + result.submitted_hours
            print(f"Submitted: {result.submitted_hours:.2f}h")
            print(f"Status: [OK] Complete ({total:.2f} / {target}h)")
        print()
        logger.info(
            f"Daily sync finished: {len(result.results)} entries, "
            f"{result.submitted_hours:.2f}h submitted, "
            f"{len(result.failures)} failed"
        )


# ============================================================================
# COMMAND LINE INTERFACE
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Redmine Daily Time Tracking Automation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python redmine_autotrack.py                          # Fill up today
  python redmine_autotrack.py --dry                    # Preview only
  python redmine_autotrack.py --today 2026-02-01       # Fill up a past day
  python redmine_autotrack.py --hours 6                # Part-time day
  python redmine_autotrack.py --setup                  # Write config.json
        """
    )

    parser.add_argument('--apikey', type=str, help='Redmine API key')
    parser.add_argument('--host', type=str, help='Redmine host')
    parser.add_argument(
        '--hours', type=float,
        help=f'Work hours per day (default: {DEFAULT_WORK_HOURS})'
    )
    parser.add_argument(
        '--today', type=str, metavar='YYYY-MM-DD',
        help="Date to use as 'today'"
    )
    parser.add_argument(
        '--dry', '--dry-run', dest='dry', action='store_true',
        help='Compute the allocation without creating time entries'
    )
    parser.add_argument(
        '--debug', action='store_true', help='Verbose diagnostic logging'
    )
    parser.add_argument(
        '--activity-id', type=int,
        help=f'Time entry activity id (default: {DEFAULT_ACTIVITY_ID})'
    )
    parser.add_argument(
        '--strict-ledger', action='store_true',
        help='Abort when tracked hours cannot be read instead of assuming 0'
    )
    parser.add_argument(
        '--workers', type=int, default=MAX_WORKERS,
        help=f'Parallel submissions (default: {MAX_WORKERS})'
    )
    parser.add_argument(
        '--config', type=str,
        help=f'Config file (default: {CONFIG_FILE})'
    )
    parser.add_argument(
        '--setup', action='store_true', help='Run setup wizard'
    )
    parser.add_argument(
        '--logfile', type=str,
        help='Also write log output to this file (appends)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.debug, args.logfile)

    config_manager = ConfigManager(
        Path(args.config) if args.config else CONFIG_FILE
    )

    try:
        if args.setup:
            config_manager.setup_wizard()
            return 0
        settings = build_settings(args, config_manager.load_config())
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        print(f"\n[ERROR] {e}")
        return 2
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 1

    logger.info(f"Target date is {settings.today}")

    try:
        result = TimeTrackingAutomation(settings).sync_daily()
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\n[ERROR] {e}")
        return 1
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
