import argparse
import logging
import os
import sys
from pathlib import Path

from mailing_list.adapters.sqlite.migrator import SQLiteMigrator
from mailing_list.logging_config import configure_logging
from mailing_list.settings import Settings, load_settings
from mailing_list.settings.loader import SETTINGS_PATH_ENV

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    Path(settings.database.path).parent.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(settings.database.path, settings.database.migrations_dir)
    if args.dry_run:
        pending = migrator.pending_migrations()
        print(f"{len(pending)} pending migration(s).")
        for filename in pending:
            print(f"  {filename}")
        return
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run(
        "mailing_list.api.main:app",
        host=args.host or settings.application.host,
        port=args.port or settings.application.port,
        log_config=None,
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Mailing list service CLI")
    parser.add_argument("--settings", help="Path to settings YAML (default: settings.yaml)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="Apply database migrations")
    migrate_parser.add_argument(
        "--dry-run", action="store_true", help="List pending migrations without applying"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Bind port")

    args = parser.parse_args(argv)

    if args.settings:
        # The served app loads its own settings on startup
        os.environ[SETTINGS_PATH_ENV] = args.settings

    try:
        settings = load_settings(Path(args.settings) if args.settings else None)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Could not load settings: %s", e)
        sys.exit(1)

    configure_logging(settings.logging.level, settings.logging.json_logs)

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "serve":
        handle_serve(settings, args)


if __name__ == "__main__":
    main()
