"""SQLAlchemy engine and declarative base."""

import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base

from app import settings


def normalize_database_url(url: str) -> str:
    """Force the psycopg2 driver for any PostgreSQL URL variant."""
    if "psycopg://" in url:
        return url.replace("psycopg://", "psycopg2://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg2://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    return url


# DATABASE_URL wins over the POSTGRES_* variables
DATABASE_URL = normalize_database_url(
    os.getenv("DATABASE_URL") or settings.SQLALCHEMY_DATABASE_URL
)

_connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # Request handlers run on threadpool workers
    _connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)

Base = declarative_base()
