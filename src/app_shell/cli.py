import argparse
import logging
import sys
from pathlib import Path
from uuid import UUID

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteMemberRepo, SQLiteSettingsRepo
from src.components.membership import resolve_member, run_expire_members
from src.components.settings import SettingsService, defaults_from_rules
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger("cli")

DB_PATH = "data/tipa.db"
RULES_PATH = "rules.yaml"
MIGRATIONS_DIR = "migrations"


def get_rules(path: str) -> Rules:
    try:
        return load_rules(Path(path))
    except (FileNotFoundError, ValueError) as e:
        logger.error("Cannot load rules: %s", e)
        sys.exit(1)


def handle_migrate(args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(args.db, MIGRATIONS_DIR).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_expire(args: argparse.Namespace) -> None:
    out = run_expire_members(repo=SQLiteMemberRepo(args.db), time_port=SystemClock())
    print(out.message)
    for m in out.expired_members:
        print(f"  {m.id}  {m.email}")


def handle_status(args: argparse.Namespace) -> None:
    rules = get_rules(args.rules)
    try:
        member_id = UUID(args.member_id)
    except ValueError:
        logger.error("Invalid member id: %s", args.member_id)
        sys.exit(1)

    member = SQLiteMemberRepo(args.db).get_by_id(member_id)
    if member is None:
        logger.error("Member %s not found", args.member_id)
        sys.exit(1)

    policy = SettingsService(
        SQLiteSettingsRepo(args.db), defaults_from_rules(rules.membership)
    ).get_trial_policy()
    status = resolve_member(member, SystemClock().now_utc(), policy)

    print(f"{member.email}: {member.status}, {status.level_display}")
    print(f"  on trial:   {status.is_on_trial}")
    print(f"  expired:    {status.is_expired}")
    print(f"  expires:    {status.effective_expiry_date or 'never'}")
    print(f"  can access: {status.can_access}")


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="TIPA members CLI")
    parser.add_argument("--db", default=DB_PATH, help="SQLite database path")
    parser.add_argument("--rules", default=RULES_PATH, help="Rules file path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending migrations")
    subparsers.add_parser("expire-members", help="Expire members whose paid period ended")

    status_parser = subparsers.add_parser("status", help="Show a member's resolved status")
    status_parser.add_argument("member_id", help="Member UUID")

    args = parser.parse_args()

    if args.command == "migrate":
        handle_migrate(args)
    elif args.command == "expire-members":
        handle_expire(args)
    elif args.command == "status":
        handle_status(args)


if __name__ == "__main__":
    main()
