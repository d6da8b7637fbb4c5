"""
Connection liveness check.
"""

from sqlalchemy.engine import Connection

_VALIDATION_QUERY = "SELECT 1"


def health_check(conn: Connection) -> bool:
    """
    Run SELECT 1 and return True if no exception.
    """
    try:
        conn.exec_driver_sql(_VALIDATION_QUERY).scalar()
        return True
    except Exception:
        return False
