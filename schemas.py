# schemas.py
# Request bodies. Fields are optional so the routes can answer missing data
# with a single 400 message, the way the web client expects.
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ClienteIn(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  nombre: Optional[str] = None
  apellido: Optional[str] = None
  dni_o_cuit: Optional[str] = Field(default=None, validation_alias=AliasChoices("dniOCuit", "dni_o_cuit"))
  email: Optional[str] = None
  telefono: Optional[str] = None
  direccion: Optional[str] = None
  ciudad: Optional[str] = None
  codigo_postal: Optional[str] = Field(default=None, validation_alias=AliasChoices("codigoPostal", "codigo_postal"))
  zona_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("zonaId", "zona_id"))


class FacturaIn(BaseModel):
  cliente_id: Optional[int] = None
  lectura_id: Optional[int] = None
  numero_factura: Optional[str] = None
  fecha_vencimiento: Optional[date] = None
  periodo_facturado_inicio: Optional[date] = None
  periodo_facturado_fin: Optional[date] = None
  consumo_m3: Optional[Decimal] = None
  descuentos: Decimal = Decimal("0")
  recargos: Decimal = Decimal("0")
  metodo_pago: Optional[str] = None
  observaciones: Optional[str] = None


class PagoIn(BaseModel):
  factura_id: Optional[int] = None
  monto_pagado: Optional[Decimal] = None
  metodo_pago: Optional[str] = None
  observaciones: Optional[str] = None
