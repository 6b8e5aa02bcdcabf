"""
Programmatic Alembic migration runner.

Allows running migrations without an alembic.ini by pointing the script
location at this package's migrations directory.

Usage examples:
    python -m shop_auth.db.run_migrations upgrade head
    python -m shop_auth.db.run_migrations downgrade -1
    python -m shop_auth.db.run_migrations current
"""

import logging
import sys
from pathlib import Path
from typing import List

from alembic import command
from alembic.config import Config

from shop_auth.core.logging import configure_logging
from shop_auth.core.settings import get_app_settings
from shop_auth.db.config import get_settings

logger = logging.getLogger(__name__)


def build_config() -> Config:
    """Alembic Config bound to the packaged migrations and the configured database."""
    cfg = Config()
    script_location = Path(__file__).resolve().parent / "migrations"
    cfg.set_main_option("script_location", str(script_location))
    # Offline URL; env.py uses the async URL when online.
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url)
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None) -> None:
    """Run an Alembic command with programmatic configuration."""
    configure_logging(get_app_settings().log_level)
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        logger.error("No Alembic arguments provided. Example: upgrade head")
        sys.exit(1)

    cfg = build_config()
    cmd, other = args[0], args[1:]

    if cmd == "upgrade":
        command.upgrade(cfg, *(other or ["head"]))
    elif cmd == "downgrade":
        command.downgrade(cfg, *(other or ["-1"]))
    elif cmd == "history":
        command.history(cfg, *other)
    elif cmd == "current":
        command.current(cfg, *other)
    elif cmd == "heads":
        command.heads(cfg, *other)
    else:
        logger.error("Unsupported Alembic command: %s", cmd)
        sys.exit(2)


if __name__ == "__main__":
    main()
