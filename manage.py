#!/usr/bin/env python3
"""
InvoiceFlow management CLI.

Usage:
    python manage.py serve       Start the API server in the foreground
    python manage.py migrate     Apply pending database migrations
    python manage.py status      Show migration status
    python manage.py verify      Verify schema integrity
"""

import argparse
import asyncio
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


def cmd_serve(args: argparse.Namespace) -> None:
    """Start uvicorn; migrations run in the app lifespan."""
    uvicorn_cmd = [
        sys.executable, "-m", "uvicorn",
        "invoiceflow.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        uvicorn_cmd.append("--reload")

    print(f"Starting server on {args.host}:{args.port}...")
    try:
        sys.exit(subprocess.call(uvicorn_cmd, cwd=str(ROOT_DIR)))
    except KeyboardInterrupt:
        print("\nServer stopped.")


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from invoiceflow.infrastructure.storage.sqlite.migrations import initialize_database

    results = asyncio.run(initialize_database(args.db_path))
    if not results:
        print("Database is up to date.")
    for result in results:
        status = "SUCCESS" if result.success else "FAILED"
        print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    if any(not r.success for r in results):
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    """Show applied and pending migrations."""
    from invoiceflow.infrastructure.storage.sqlite.migrations import get_migration_status

    status = asyncio.run(get_migration_status(args.db_path))
    print(f"Database exists: {status['exists']}")
    print(f"Current version: {status.get('current_version') or 'N/A'}")
    print(f"Applied migrations: {status.get('applied_migrations', [])}")
    print(f"Pending migrations: {status.get('pending_migrations', [])}")
    if status.get("modified_migrations"):
        print(f"Modified since applied: {status['modified_migrations']}")
        sys.exit(1)


def cmd_verify(args: argparse.Namespace) -> None:
    """Verify integrity, keys, uniqueness constraints and money column types."""
    from invoiceflow.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    checks = asyncio.run(verify_schema_integrity(args.db_path))
    failed = False
    for check in checks:
        passed = check["status"] == "PASS"
        failed = failed or not passed
        print(f"[{'PASS' if passed else 'FAIL'}] {check['check']}")
        if not passed:
            for key, value in check.items():
                if key not in ("check", "status"):
                    print(f"       {key}: {value}")
    if failed:
        sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="InvoiceFlow management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_status.set_defaults(func=cmd_status)

    # verify
    p_verify = sub.add_parser("verify", help="Verify schema integrity")
    p_verify.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_verify.set_defaults(func=cmd_verify)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
