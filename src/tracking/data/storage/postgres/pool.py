from psycopg_pool import ConnectionPool


def create_pool(dsn: str, *, max_size: int = 4) -> ConnectionPool:
    return ConnectionPool(conninfo=dsn, min_size=1, max_size=max_size, kwargs={"autocommit": False})
