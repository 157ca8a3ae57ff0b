# src/tracking/cli/migrate.py
from pathlib import Path
import os

from dotenv import load_dotenv

from src.tracking.data.storage.postgres.pool import create_pool
from src.tracking.data.storage.postgres.storage import PostgresOrdersStorage


def main() -> None:
    load_dotenv()
    dsn = os.getenv("PG_DSN")
    if not dsn:
        raise SystemExit("PG_DSN env var is required")

    pool = create_pool(dsn)
    store = PostgresOrdersStorage(pool)

    ddl_path = Path(__file__).resolve().parents[1] / "data" / "storage" / "postgres" / "ddl.sql"
    store.exec_ddl(ddl_path.read_text(encoding="utf-8"))
    pool.close()
    print(f"[migrate] applied {ddl_path.name}")


if __name__ == "__main__":
    main()
