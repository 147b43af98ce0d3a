"""CLI entry point: database setup, per-user reports, CSV export and the web server."""

import argparse
import logging
import sys
from datetime import datetime

from job_tracker.config import AppConfig, load_config, load_config_or_default, validate_config
from job_tracker.errors import TrackerError
from job_tracker.export import write_jobs_csv
from job_tracker.jobs.notifications import derive_notifications
from job_tracker.jobs.stats import compute_stats, status_breakdown
from job_tracker.models import SessionLocal, User, init_db
from job_tracker.storage.job_store import JobStore
from job_tracker.utils.logging_config import setup_logging

logger = logging.getLogger("job_tracker")

DEFAULT_CONFIG = "config.yaml"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Job Tracker - track job applications on a kanban board",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG,
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--init-db", action="store_true",
        help="Create database tables and exit",
    )
    parser.add_argument(
        "--stats", metavar="EMAIL",
        help="Print application statistics for a user and exit",
    )
    parser.add_argument(
        "--notifications", metavar="EMAIL",
        help="Print current reminders for a user and exit",
    )
    parser.add_argument(
        "--export-csv", metavar="EMAIL",
        help="Export a user's applications as CSV",
    )
    parser.add_argument(
        "--output", metavar="PATH",
        help="File for --export-csv (default: stdout)",
    )
    parser.add_argument(
        "--serve", action="store_true",
        help="Run the web app with uvicorn",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    return parser.parse_args(argv)


def _load_user_jobs(db, email: str):
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None:
        raise TrackerError(f"No user with email {email}")
    return user, JobStore(db).list_for_owner(user.id)


def print_stats(db, email: str, config: AppConfig):
    user, jobs = _load_user_jobs(db, email)
    stats = compute_stats(jobs, datetime.now().astimezone(), config.tracker.weekly_goal)

    print(f"\n=== Job Tracker Statistics: {user.email} ===")
    print(f"Total applications: {stats.total}")
    for name, count, pct in status_breakdown(stats):
        print(f"  {name}: {count} ({pct:.0f}%)")
    print(f"Response rate: {stats.response_rate:.1f}%")
    print(f"Success rate: {stats.success_rate:.1f}%")
    print(f"Average days to response: {stats.avg_days_to_response:.1f}")
    print(f"Average salary: {stats.avg_salary:,.0f}")
    print(f"This week: {stats.weekly_progress}/{stats.weekly_goal}")
    print()


def print_notifications(db, email: str):
    _, jobs = _load_user_jobs(db, email)
    notifications = derive_notifications(jobs, datetime.now().astimezone())
    if not notifications:
        print("No notifications.")
        return
    for n in notifications:
        print(f"[{n.type}] {n.title} - {n.message}")


def export_csv(db, email: str, output: str | None):
    _, jobs = _load_user_jobs(db, email)
    if output:
        with open(output, "w", newline="", encoding="utf-8") as fh:
            count = write_jobs_csv(jobs, fh)
        logger.info("Exported %d applications to %s", count, output)
    else:
        write_jobs_csv(jobs, sys.stdout)


def serve(config: AppConfig, host: str, port: int):
    import uvicorn

    from job_tracker.web.app import create_app

    logger.info("Starting web app on http://%s:%d", host, port)
    uvicorn.run(create_app(config), host=host, port=port)


def main(argv=None):
    args = parse_args(argv)

    # Load config; the default path may be absent, an explicit one may not
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        if args.config != DEFAULT_CONFIG:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        config = load_config_or_default(args.config)

    setup_logging(config.log_dir)

    for w in validate_config(config):
        logger.warning("Config: %s", w)

    if args.serve:
        serve(config, args.host, args.port)
        return

    init_db()
    if args.init_db:
        print("Database initialised.")
        return

    if not (args.stats or args.notifications or args.export_csv):
        print("Nothing to do. See --help.", file=sys.stderr)
        sys.exit(2)

    db = SessionLocal()
    try:
        if args.stats:
            print_stats(db, args.stats, config)
        if args.notifications:
            print_notifications(db, args.notifications)
        if args.export_csv:
            export_csv(db, args.export_csv, args.output)
    except TrackerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
