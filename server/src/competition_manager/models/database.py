"""Database engine and per-request sessions"""

import os

from sqlalchemy import create_engine
from sqlmodel import Session

from competition_manager.config import config

# Database URL from config
DATABASE_URL = config["database_url"]

# Validate DATABASE_URL exists
if not DATABASE_URL:
    raise ValueError(
        "DATABASE_URL environment variable is not set. "
        "Set DATABASE_URL in the deployment environment or the local .env file."
    )

# Pooled engine; sessions check a connection out per unit of work
engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("DEBUG", "false").lower() == "true",
    pool_pre_ping=True,
)


def get_db():
    """Get database session"""
    with Session(engine) as session:
        yield session
