from __future__ import annotations

import argparse
import sys

from form_intake.core.config import settings
from form_intake.core.registry import ConfigError, load_configuration
from form_intake.db.session import build_engine
from form_intake.services.schema_init import SchemaInitError, drop_schema, initialize_schema


def main() -> None:
    parser = argparse.ArgumentParser(description="Drop and recreate every configured form table (deletes all submissions)")
    parser.add_argument("--config", default=settings.CONFIG_PATH, help="Path to the YAML form configuration")
    parser.add_argument("--yes", action="store_true", help="Confirm that stored submissions may be deleted")
    args = parser.parse_args()

    if not args.yes:
        print("Refusing to drop tables without --yes", file=sys.stderr)
        sys.exit(2)

    try:
        configuration = load_configuration(args.config)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    engine = build_engine(configuration.sqlalchemy_url, pool_size=1)
    try:
        dropped = drop_schema(engine, configuration)
        created = initialize_schema(engine, configuration)
    except SchemaInitError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)
    finally:
        engine.dispose()
    print(f"tables reset: dropped={len(dropped)}, created={len(created)}")


if __name__ == "__main__":
    main()
