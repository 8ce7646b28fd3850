# tests/conftest.py
"""Shared fixtures: a fresh app per test backed by a temporary SQLite file."""
import itertools
import os
from datetime import date, timedelta
from decimal import Decimal

# main builds a module-level app on import
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from main import create_app
from models import Cliente, EstadoFactura, Factura, Lectura, ModoLiquidacion, Zona
from settings import Settings

_seq = itertools.count(1)


def make_settings(tmp_path, **overrides) -> Settings:
  return Settings(database_url=f"sqlite:///{tmp_path / 'test.db'}", **overrides)


@pytest.fixture
def modo_liquidacion():
  return ModoLiquidacion.PAGO_UNICO


@pytest.fixture
def app(tmp_path, modo_liquidacion):
  return create_app(make_settings(tmp_path, modo_liquidacion=modo_liquidacion))


@pytest.fixture
def client(app):
  with TestClient(app) as c:
    yield c


@pytest.fixture
def engine(app, client):
  # depends on client so the lifespan has created the tables
  return app.state.engine


def _insert(engine, obj):
  with Session(engine) as session:
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj.id


@pytest.fixture
def crear_zona(engine):
  def _crear(**kwargs) -> int:
    n = next(_seq)
    data = {
      "nombre": f"Zona {n}",
      "codigo": f"Z{n:03d}",
      "tarifa_basica": Decimal("1000.00"),
      "tarifa_exceso": Decimal("50.00"),
      "consumo_basico_m3": Decimal("20"),
    }
    data.update(kwargs)
    return _insert(engine, Zona(**data))
  return _crear


@pytest.fixture
def crear_cliente(engine):
  def _crear(**kwargs) -> int:
    n = next(_seq)
    data = {
      "nombre": "Juan",
      "apellido": "Pérez",
      "dni_o_cuit": f"20{n:08d}",
      "direccion": f"Calle {n}",
    }
    data.update(kwargs)
    return _insert(engine, Cliente(**data))
  return _crear


@pytest.fixture
def crear_lectura(engine):
  def _crear(cliente_id: int, consumo_m3: str = "25") -> int:
    return _insert(engine, Lectura(
      cliente_id=cliente_id,
      lectura_anterior=Decimal("100"),
      lectura_actual=Decimal("100") + Decimal(consumo_m3),
      consumo_m3=Decimal(consumo_m3),
    ))
  return _crear


@pytest.fixture
def crear_factura(engine):
  def _crear(cliente_id: int, **kwargs) -> int:
    n = next(_seq)
    data = {
      "numero_factura": f"F-{n:05d}",
      "cliente_id": cliente_id,
      "fecha_vencimiento": date.today() + timedelta(days=10),
      "total": Decimal("1000.00"),
      "estado_factura": EstadoFactura.PENDIENTE.value,
    }
    data.update(kwargs)
    return _insert(engine, Factura(**data))
  return _crear


@pytest.fixture
def leer(engine):
  def _leer(model, obj_id):
    with Session(engine) as session:
      return session.get(model, obj_id)
  return _leer
