"""
Database configuration and session management.
"""
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    url: str = "sqlite:///./data/game.db"
    echo: bool = False

    model_config = SettingsConfigDict(
        env_prefix="RAT_DATABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # Ignore extra environment variables
    )


# Create declarative base
Base = declarative_base()


def create_database_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL, preparing the SQLite directory if needed."""
    if url.startswith("sqlite"):
        database_path = url.split("///", 1)[1] if "///" in url else ""
        if database_path and database_path != ":memory:":
            Path(database_path).parent.mkdir(parents=True, exist_ok=True)

        # SQLite configuration with thread safety
        return create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={
                "check_same_thread": False,
            },
        )

    return create_engine(url, echo=echo)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create session factory bound to the engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine
    )


def create_tables(engine: Engine):
    """Create all database tables."""
    # Register models on Base.metadata
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
