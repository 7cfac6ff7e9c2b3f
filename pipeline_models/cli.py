"""
pipeline-models CLI.

Usage:
    pipeline-models version                      # Show version
    pipeline-models migrate [--dry-run|--check]  # Create the model_records table
    pipeline-models template create --name N --version 1.3 [...]
    pipeline-models template get --name N [--version 1] [--label stable]
    pipeline-models template list --name N [--label stable]
    pipeline-models token create --user-id U --name N [--description D]

Records are printed as JSON. With the default in-memory datastore nothing
survives the process; set PIPELINE_MODELS_DATASTORE=postgres to persist.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import psycopg2

from pipeline_models.config import get_config
from pipeline_models.errors import ModelsError
from pipeline_models.factories import FactoryRegistry, TemplateFactory, TokenFactory

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ["model_records"]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pipeline-models",
        description="Versioned templates and access tokens over a pluggable datastore.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # version
    subparsers.add_parser("version", help="Show version")

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Run database migrations")
    migrate_parser.add_argument("--dry-run", action="store_true", help="Print SQL without executing")
    migrate_parser.add_argument("--check", action="store_true", help="Check if required tables exist")

    # template
    tpl_parser = subparsers.add_parser("template", help="Create and look up templates")
    tpl_sub = tpl_parser.add_subparsers(dest="template_command")

    tpl_create = tpl_sub.add_parser("create", help="Create a template (patch is assigned)")
    tpl_create.add_argument("--name", required=True)
    tpl_create.add_argument("--version", dest="tpl_version", required=True, help="Major or major.minor")
    tpl_create.add_argument("--maintainer", default="")
    tpl_create.add_argument("--description", default="")
    tpl_create.add_argument("--label", action="append", default=[], help="Repeatable")
    tpl_create.add_argument("--config", default="{}", help="Template config as a JSON object")
    tpl_create.add_argument("--pipeline-id", default=None)

    tpl_get = tpl_sub.add_parser("get", help="Show the highest matching version")
    tpl_get.add_argument("--name", required=True)
    tpl_get.add_argument("--version", dest="tpl_version", default=None, help="Version prefix")
    tpl_get.add_argument("--label", default=None)

    tpl_list = tpl_sub.add_parser("list", help="List versions, newest first")
    tpl_list.add_argument("--name", required=True)
    tpl_list.add_argument("--label", default=None)

    # token
    tok_parser = subparsers.add_parser("token", help="Issue access tokens")
    tok_sub = tok_parser.add_subparsers(dest="token_command")
    tok_create = tok_sub.add_parser("create", help="Issue a token; the value is shown only once")
    tok_create.add_argument("--user-id", required=True)
    tok_create.add_argument("--name", required=True)
    tok_create.add_argument("--description", default="")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from pipeline_models import __version__

        print(f"pipeline-models {__version__}")
        return 0

    cfg = get_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command == "migrate":
        return _cmd_migrate(args)
    elif args.command == "template" and args.template_command:
        return _run(_cmd_template(args))
    elif args.command == "token" and args.token_command:
        return _run(_cmd_token(args))
    else:
        parser.print_help()
        return 0


def _run(coro) -> int:
    try:
        return asyncio.run(coro)
    except (ModelsError, ValueError, ConnectionError, psycopg2.Error) as e:
        print(f"Error: {e}")
        return 1


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


async def _cmd_template(args: argparse.Namespace) -> int:
    registry = FactoryRegistry.from_config(get_config())
    templates = registry.get_instance(TemplateFactory)

    if args.template_command == "create":
        try:
            config = json.loads(args.config)
        except json.JSONDecodeError as e:
            print(f"Error: --config is not valid JSON: {e}")
            return 1
        template = await templates.create(
            {
                "name": args.name,
                "version": args.tpl_version,
                "maintainer": args.maintainer,
                "description": args.description,
                "labels": args.label,
                "config": config,
                "pipeline_id": args.pipeline_id,
            }
        )
        _print_json(template.to_record())
        return 0

    if args.template_command == "get":
        template = await templates.get_template(args.name, version=args.tpl_version, label=args.label)
        if template is None:
            print(f"No template found for {args.name}")
            return 1
        _print_json(template.to_record())
        return 0

    versions = await templates.list_versions(args.name, label=args.label)
    _print_json([t.to_record() for t in versions])
    return 0


async def _cmd_token(args: argparse.Namespace) -> int:
    registry = FactoryRegistry.from_config(get_config())
    tokens = registry.get_instance(TokenFactory)

    token = await tokens.create(
        {"user_id": args.user_id, "name": args.name, "description": args.description}
    )
    _print_json(token.to_public_dict())
    print("Store this value now; it cannot be shown again.", file=sys.stderr)
    return 0


def _find_migration_sql() -> str | None:
    """Find the migration SQL file bundled with the package."""
    bundled = Path(__file__).parent / "migrations" / "001_init.sql"
    if bundled.exists():
        return bundled.read_text()
    return None


def _cmd_migrate(args: argparse.Namespace) -> int:
    sql = _find_migration_sql()
    if sql is None:
        print("Error: Migration SQL not found.")
        print("Expected at: pipeline_models/migrations/001_init.sql")
        return 1

    if args.check:
        return _cmd_migrate_check()

    if args.dry_run:
        print("-- Dry run: the following SQL would be executed --")
        print(sql)
        return 0

    try:
        cfg = get_config().db
        print(f"Connecting to {cfg.host}:{cfg.port}/{cfg.name}...")
        conn = psycopg2.connect(**cfg.dict, connect_timeout=5)
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute(sql)
        conn.close()
        print("Migration completed successfully.")

        return _cmd_migrate_check()

    except psycopg2.Error as e:
        print(f"Error: Migration failed: {e}")
        print("Check PIPELINE_MODELS_DB_* environment variables and ensure PostgreSQL is running.")
        return 1


def _cmd_migrate_check() -> int:
    """Check if required tables exist in the database."""
    try:
        cfg = get_config().db
        conn = psycopg2.connect(**cfg.dict, connect_timeout=5)
        with conn.cursor() as cur:
            cur.execute(
                "SELECT table_name FROM information_schema.tables WHERE table_schema = 'public'"
            )
            existing = {row[0] for row in cur.fetchall()}
        conn.close()
    except psycopg2.Error as e:
        print(f"Error: Cannot check tables: {e}")
        return 1

    missing = [t for t in REQUIRED_TABLES if t not in existing]
    if missing:
        print(f"Missing tables ({len(missing)}/{len(REQUIRED_TABLES)}):")
        for t in missing:
            print(f"  - {t}")
        print("\nRun 'pipeline-models migrate' to create them.")
        return 1
    print(f"All {len(REQUIRED_TABLES)} required tables present.")
    return 0
