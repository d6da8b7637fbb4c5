"""
Split a SQL script into statements.
"""

STATEMENT_SEPARATOR = ";"


def split_statements(script: str) -> list[str]:
    """
    Split *script* on ``;``, trim each piece and drop empty ones.

    Deliberately naive: a ``;`` inside a string literal, a comment or a
    procedural block still ends the statement. Scripts relying on that need
    to avoid the separator in those places.
    """
    return [
        stmt.strip()
        for stmt in (script or "").split(STATEMENT_SEPARATOR)
        if stmt.strip()
    ]
