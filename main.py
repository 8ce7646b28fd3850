# main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlmodel import Session

from clientes_route import router as clientes_router
from db import create_db_engine, get_session, init_db
from errors import register_error_handlers
from facturas_route import router as facturas_router
from logging_config import setup_logging
from pagos_route import router as pagos_router
from settings import Settings, load_settings
from zonas_route import router as zonas_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
  settings = settings or load_settings()
  setup_logging(settings.log_level, settings.log_format)

  engine = create_db_engine(settings.database_url, echo=settings.sql_echo)

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    init_db(engine)
    logger.info("database ready (%s)", engine.url.get_backend_name())
    yield
    engine.dispose()

  app = FastAPI(title="Aguas Billing Backend", version="1.0.0", lifespan=lifespan)
  app.state.settings = settings
  app.state.engine = engine

  app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )
  register_error_handlers(app)

  app.include_router(zonas_router)
  app.include_router(clientes_router)
  app.include_router(facturas_router)
  app.include_router(pagos_router)

  @app.get("/health")
  def health(session: Session = Depends(get_session)):
    session.connection().execute(text("SELECT 1"))
    return {"ok": True, "database": engine.url.get_backend_name()}

  return app


app = create_app()
