from sqlmodel import SQLModel, create_engine

from sqlrunner.core.config import settings

# Store database for connection profiles (not one of the execution targets).
engine = create_engine(settings.DATABASE_URL)


def init_db() -> None:
    """Create the connection_profile table when it does not exist yet."""
    from sqlrunner import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
