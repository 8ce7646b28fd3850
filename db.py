# db.py
from typing import Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import models  # noqa: F401  registers the tables on SQLModel.metadata


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
  cursor = dbapi_connection.cursor()
  cursor.execute("PRAGMA foreign_keys=ON")
  cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
  if not database_url.startswith("sqlite"):
    return create_engine(database_url, echo=echo, pool_pre_ping=True)

  kwargs = {"connect_args": {"check_same_thread": False}}
  if database_url in ("sqlite://", "sqlite:///:memory:"):
    kwargs["poolclass"] = StaticPool

  engine = create_engine(database_url, echo=echo, **kwargs)
  event.listen(engine, "connect", _enable_sqlite_foreign_keys)
  return engine


def init_db(engine: Engine) -> None:
  SQLModel.metadata.create_all(engine)


def get_session(request: Request) -> Iterator[Session]:
  with Session(request.app.state.engine) as session:
    yield session
