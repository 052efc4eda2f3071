"""Create or upgrade the deduction tables, optionally loading the default config.

    python scripts/setup_db.py            # schema only
    python scripts/setup_db.py --seed     # schema + default Global tiers and packages

Safe to re-run: the schema uses CREATE ... IF NOT EXISTS, and the seed replaces the
Global tiers and upserts the default packages.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.lateness_system.lateness_system.database.bootstrap import apply_schema, apply_seed_sql, list_tables

REQUIRED_TABLES = ("deduction_tiers", "package_base_amounts", "deduction_waivers", "lateness_events")

logger = logging.getLogger("setup_db")


def _target(db_config: dict) -> str:
    return f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", action="store_true", help="also apply database/seed.sql")
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    if args.seed:
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")

    missing = sorted(set(REQUIRED_TABLES) - set(list_tables(db_config)))
    if missing:
        logger.error("%s is missing tables: %s", _target(db_config), ", ".join(missing))
        return 1

    logger.info("%s ready%s", _target(db_config), " (seeded)" if args.seed else "")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
