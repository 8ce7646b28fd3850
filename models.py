# models.py
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, text
from sqlmodel import SQLModel, Field


class EstadoFactura(str, Enum):
  PENDIENTE = "Pendiente"
  PAGADA = "Pagada"
  VENCIDA = "Vencida"


class ModoLiquidacion(str, Enum):
  PAGO_UNICO = "pago_unico"  # a single payment must cover the total
  ACUMULADO = "acumulado"  # the payment journal sum must cover the total


def utcnow() -> datetime:
  return datetime.now(timezone.utc)


def _money(default: str = "0", **kwargs):
  return Field(default=Decimal(default), max_digits=12, decimal_places=2, **kwargs)


class Zona(SQLModel, table=True):
  __tablename__ = "zonas"

  id: Optional[int] = Field(default=None, primary_key=True)
  nombre: str = Field(index=True)
  descripcion: Optional[str] = None
  codigo: str = Field(unique=True)
  tarifa_basica: Decimal = _money()
  tarifa_exceso: Decimal = _money()
  consumo_basico_m3: Decimal = _money("20")  # m3 covered by tarifa_basica
  estado: bool = True


class Cliente(SQLModel, table=True):
  __tablename__ = "clientes"
  __table_args__ = (
    # dni/cuit is only unique among active customers
    Index(
      "uq_clientes_dni_o_cuit_activo",
      "dni_o_cuit",
      unique=True,
      postgresql_where=text("estado"),
      sqlite_where=text("estado"),
    ),
  )

  id: Optional[int] = Field(default=None, primary_key=True)
  nombre: str
  apellido: str
  dni_o_cuit: str
  email: Optional[str] = None
  telefono: Optional[str] = None
  direccion: str
  ciudad: str = "No especificada"
  codigo_postal: Optional[str] = None
  zona_id: Optional[int] = Field(default=None, foreign_key="zonas.id")
  estado: bool = True
  fecha_registro: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
  fecha_modificacion: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class Lectura(SQLModel, table=True):
  __tablename__ = "lecturas"

  id: Optional[int] = Field(default=None, primary_key=True)
  cliente_id: int = Field(foreign_key="clientes.id", index=True)
  fecha_lectura: date = Field(default_factory=date.today)
  lectura_anterior: Decimal = _money()
  lectura_actual: Decimal = _money()
  consumo_m3: Decimal = _money()


class Factura(SQLModel, table=True):
  __tablename__ = "facturas"

  id: Optional[int] = Field(default=None, primary_key=True)
  numero_factura: str = Field(unique=True, index=True)
  cliente_id: int = Field(foreign_key="clientes.id", index=True)
  lectura_id: Optional[int] = Field(default=None, foreign_key="lecturas.id")
  fecha_emision: date = Field(default_factory=date.today)
  fecha_vencimiento: date
  periodo_facturado_inicio: Optional[date] = None
  periodo_facturado_fin: Optional[date] = None
  consumo_m3: Decimal = _money()
  tarifa_basica: Decimal = _money()
  tarifa_exceso: Decimal = _money()
  subtotal: Decimal = _money()
  descuentos: Decimal = _money()
  recargos: Decimal = _money()
  impuestos: Decimal = _money()
  total: Decimal = _money()
  estado_factura: str = EstadoFactura.PENDIENTE.value  # Pendiente|Pagada|Vencida
  metodo_pago: Optional[str] = None
  fecha_pago: Optional[date] = None
  observaciones: Optional[str] = None


class Pago(SQLModel, table=True):
  __tablename__ = "pagos"

  id: Optional[int] = Field(default=None, primary_key=True)
  factura_id: int = Field(foreign_key="facturas.id", index=True)
  fecha_pago: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
  monto_pagado: Decimal = _money()
  metodo_pago: Optional[str] = None
  observaciones: Optional[str] = None
