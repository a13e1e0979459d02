"""
Alembic runner for the workshop schema.

Builds the Alembic config in code (there is no alembic.ini) with the script
location pointing at src/db/migrations.

    python -m src.db.run_migrations upgrade head
    python -m src.db.run_migrations downgrade -1
    python -m src.db.run_migrations current
"""

import sys
from pathlib import Path
from typing import List, Optional

from alembic import command
from alembic.config import Config

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

COMMANDS = {
    "upgrade": (command.upgrade, "head"),
    "downgrade": (command.downgrade, "-1"),
    "current": (command.current, None),
}


# PUBLIC_INTERFACE
def build_config(database_url: Optional[str] = None) -> Config:
    """Alembic Config bound to the migrations folder and the given (or configured) database URL."""
    if database_url is None:
        from src.db.config import get_settings

        database_url = get_settings().database_url
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # read back by env.py, which switches to the async driver for online runs
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None, database_url: Optional[str] = None) -> None:
    """Run ``upgrade``, ``downgrade`` or ``current`` against the workshop database."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in COMMANDS:
        print(f"Usage: python -m src.db.run_migrations {{{'|'.join(COMMANDS)}}} [revision]")
        sys.exit(2)

    run, default_target = COMMANDS[args[0]]
    cfg = build_config(database_url)
    if default_target is None:
        run(cfg)
    else:
        run(cfg, args[1] if len(args) > 1 else default_target)


if __name__ == "__main__":
    main()
