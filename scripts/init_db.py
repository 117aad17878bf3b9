#!/usr/bin/env python3
import argparse
from pathlib import Path

from backend.config import load_settings
from backend.db import SCHEMA_PATH, apply_schema, connect_db


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the incidents table if missing.")
    parser.add_argument("--schema", type=Path, default=SCHEMA_PATH)
    args = parser.parse_args()

    load_settings()
    try:
        conn = connect_db()
    except Exception as e:
        print(f"INIT_DB_FAIL stage=connect err={type(e).__name__}")
        return 1
    try:
        apply_schema(conn, args.schema)
    except Exception as e:
        print(f"INIT_DB_FAIL stage=schema err={type(e).__name__}:{str(e)[:200]}")
        return 1
    finally:
        conn.close()

    print(f"INIT_DB_OK schema={args.schema}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
