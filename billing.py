# billing.py
"""Invoice lifecycle: overdue sweep, server-side totals and payment settlement.

Functions here never commit except the sweep; callers own the transaction so a
payment insert and the status change it triggers land together or not at all.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func, update
from sqlmodel import Session, select

from models import EstadoFactura, Factura, ModoLiquidacion, Pago, Zona

logger = logging.getLogger(__name__)

CENTAVOS = Decimal("0.01")
IVA_ALICUOTA = Decimal("0.21")


class FacturaYaPagadaError(Exception):
  pass


class ImporteInvalidoError(ValueError):
  pass


@dataclass
class Importes:
  tarifa_basica: Decimal
  tarifa_exceso: Decimal
  subtotal: Decimal
  descuentos: Decimal
  recargos: Decimal
  impuestos: Decimal
  total: Decimal


def redondear(value: Decimal) -> Decimal:
  return Decimal(value).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def actualizar_facturas_vencidas(session: Session, hoy: Optional[date] = None) -> int:
  """Flip every Pendiente invoice whose due date is before `hoy` to Vencida.

  A single bulk UPDATE, so it is safe to run before every read. Pagada
  invoices are never matched.
  """
  hoy = hoy or date.today()
  result = session.execute(
    update(Factura)
    .where(Factura.estado_factura == EstadoFactura.PENDIENTE.value)
    .where(Factura.fecha_vencimiento < hoy)
    .values(estado_factura=EstadoFactura.VENCIDA.value)
  )
  session.commit()

  if result.rowcount:
    logger.info("%s facturas marcadas como vencidas", result.rowcount)
  return result.rowcount


def calcular_importes(
  zona: Zona,
  consumo_m3: Decimal,
  descuentos: Decimal = Decimal("0"),
  recargos: Decimal = Decimal("0"),
  alicuota_iva: Decimal = IVA_ALICUOTA,
) -> Importes:
  consumo_m3 = Decimal(consumo_m3)
  descuentos = Decimal(descuentos)
  recargos = Decimal(recargos)

  if consumo_m3 < 0:
    raise ImporteInvalidoError("El consumo no puede ser negativo")
  if descuentos < 0 or recargos < 0:
    raise ImporteInvalidoError("Descuentos y recargos no pueden ser negativos")

  exceso_m3 = max(consumo_m3 - zona.consumo_basico_m3, Decimal("0"))
  subtotal = redondear(zona.tarifa_basica + exceso_m3 * zona.tarifa_exceso)

  base = subtotal - redondear(descuentos) + redondear(recargos)
  if base < 0:
    raise ImporteInvalidoError("Los descuentos superan el importe facturado")

  impuestos = redondear(base * alicuota_iva)
  return Importes(
    tarifa_basica=zona.tarifa_basica,
    tarifa_exceso=zona.tarifa_exceso,
    subtotal=subtotal,
    descuentos=redondear(descuentos),
    recargos=redondear(recargos),
    impuestos=impuestos,
    total=base + impuestos,
  )


def marcar_pagada(factura: Factura, hoy: Optional[date] = None) -> Factura:
  if factura.estado_factura == EstadoFactura.PAGADA.value:
    raise FacturaYaPagadaError(f"Factura {factura.id} ya está pagada")

  factura.estado_factura = EstadoFactura.PAGADA.value
  factura.fecha_pago = hoy or date.today()
  return factura


def total_pagado(session: Session, factura_id: int) -> Decimal:
  pagado = session.exec(
    select(func.coalesce(func.sum(Pago.monto_pagado), 0)).where(Pago.factura_id == factura_id)
  ).one()
  return redondear(Decimal(str(pagado)))


def debe_liquidarse(
  session: Session,
  factura: Factura,
  monto: Decimal,
  modo: ModoLiquidacion = ModoLiquidacion.PAGO_UNICO,
) -> bool:
  if modo == ModoLiquidacion.ACUMULADO:
    # journal already contains the flushed payment
    return total_pagado(session, factura.id) >= factura.total
  return Decimal(monto) >= factura.total


def registrar_pago(
  session: Session,
  factura: Factura,
  monto: Decimal,
  metodo_pago: Optional[str] = None,
  observaciones: Optional[str] = None,
  modo: ModoLiquidacion = ModoLiquidacion.PAGO_UNICO,
  hoy: Optional[date] = None,
) -> Pago:
  if factura.estado_factura == EstadoFactura.PAGADA.value:
    raise FacturaYaPagadaError(f"Factura {factura.id} ya está pagada")
  monto = redondear(monto)
  if monto <= 0:
    raise ImporteInvalidoError("El monto debe ser mayor a cero")

  pago = Pago(
    factura_id=factura.id,
    monto_pagado=monto,
    metodo_pago=metodo_pago,
    observaciones=observaciones,
  )
  session.add(pago)
  session.flush()

  if debe_liquidarse(session, factura, pago.monto_pagado, modo):
    marcar_pagada(factura, hoy)
    session.add(factura)
    logger.info("factura %s liquidada por el pago %s", factura.id, pago.id)

  return pago
