# settings.py
import os
from decimal import Decimal
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from models import ModoLiquidacion

DEFAULT_CORS_ORIGINS = "http://127.0.0.1:5173,http://localhost:5173"


class Settings(BaseModel):
  database_url: str
  cors_origins: List[str] = Field(default_factory=lambda: _split_origins(DEFAULT_CORS_ORIGINS))
  log_level: str = "INFO"
  log_format: str = "plain"  # plain|json
  sql_echo: bool = False
  iva_alicuota: Decimal = Decimal("0.21")
  modo_liquidacion: ModoLiquidacion = ModoLiquidacion.PAGO_UNICO


def _split_origins(raw: str) -> List[str]:
  return [x.strip() for x in raw.split(",") if x.strip()]


def normalize_db_url(url: Optional[str]) -> Optional[str]:
  if not url:
    return None
  u = url.strip()

  # Heroku/Render style urls
  if u.startswith("postgres://"):
    u = u.replace("postgres://", "postgresql+psycopg2://", 1)
  if u.startswith("postgresql://"):
    u = u.replace("postgresql://", "postgresql+psycopg2://", 1)

  return u


def load_settings() -> Settings:
  load_dotenv()

  database_url = normalize_db_url(os.getenv("DATABASE_URL", ""))
  if not database_url:
    raise RuntimeError("DATABASE_URL is not set in backend .env")

  return Settings(
    database_url=database_url,
    cors_origins=_split_origins(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
    log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    log_format=os.getenv("LOG_FORMAT", "plain").strip().lower(),
    sql_echo=os.getenv("SQL_ECHO", "false").strip().lower() in ("1", "true", "yes"),
    iva_alicuota=Decimal(os.getenv("IVA_ALICUOTA", "0.21").strip()),
    modo_liquidacion=ModoLiquidacion(os.getenv("MODO_LIQUIDACION", ModoLiquidacion.PAGO_UNICO.value).strip()),
  )
