# facturas_route.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session, col, select

from billing import (
  FacturaYaPagadaError,
  ImporteInvalidoError,
  actualizar_facturas_vencidas,
  calcular_importes,
  marcar_pagada,
  redondear,
  total_pagado,
)
from db import get_session
from errors import commit_or_conflict
from models import Cliente, EstadoFactura, Factura, Lectura
from schemas import FacturaIn
from zonas_route import zona_activa

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["facturas"])

NUMERO_DUPLICADO = "El número de factura ya existe"


def _nombre(cliente: Optional[Cliente]) -> Optional[str]:
  if not cliente:
    return None
  return f"{cliente.nombre} {cliente.apellido}"


def _facturas_con_cliente():
  return (
    select(Factura, Cliente)
    .outerjoin(Cliente, Factura.cliente_id == Cliente.id)
    .order_by(col(Factura.fecha_emision).desc(), col(Factura.id).desc())
  )


@router.get("/facturas")
def list_facturas(session: Session = Depends(get_session)):
  actualizar_facturas_vencidas(session)
  rows = session.exec(_facturas_con_cliente()).all()
  return [{**f.model_dump(), "cliente_nombre": _nombre(c)} for f, c in rows]


@router.get("/facturas/cliente/{cliente_id}")
def list_facturas_cliente(cliente_id: int, session: Session = Depends(get_session)):
  actualizar_facturas_vencidas(session)
  rows = session.exec(
    select(Factura)
    .where(Factura.cliente_id == cliente_id)
    .order_by(col(Factura.fecha_emision).desc(), col(Factura.id).desc())
  ).all()
  return [f.model_dump() for f in rows]


@router.get("/facturas/{factura_id}")
def get_factura(factura_id: int, session: Session = Depends(get_session)):
  actualizar_facturas_vencidas(session)
  row = session.exec(_facturas_con_cliente().where(Factura.id == factura_id)).first()
  if not row:
    raise HTTPException(status_code=404, detail="Factura no encontrada")

  factura, cliente = row
  pagado = total_pagado(session, factura.id)
  return {
    **factura.model_dump(),
    "cliente_nombre": _nombre(cliente),
    "pagado": pagado,
    "saldo": redondear(factura.total - pagado),
  }


@router.post("/facturas", status_code=201)
def create_factura(data: FacturaIn, request: Request, session: Session = Depends(get_session)):
  numero = (data.numero_factura or "").strip()
  if not data.cliente_id or not numero or not data.fecha_vencimiento:
    raise HTTPException(
      status_code=400,
      detail="Los campos cliente_id, numero_factura y fecha_vencimiento son obligatorios",
    )

  cliente = session.get(Cliente, data.cliente_id)
  if not cliente or not cliente.estado:
    raise HTTPException(status_code=404, detail="Cliente no encontrado")
  # same rule as customer create/update: only active zones are billable
  zona = zona_activa(session, cliente.zona_id) if cliente.zona_id else None
  if not zona:
    raise HTTPException(status_code=400, detail="El cliente no tiene una zona activa asignada")

  consumo_m3 = data.consumo_m3
  if data.lectura_id is not None:
    lectura = session.get(Lectura, data.lectura_id)
    if not lectura:
      raise HTTPException(status_code=404, detail="Lectura no encontrada")
    if lectura.cliente_id != cliente.id:
      raise HTTPException(status_code=400, detail="La lectura no pertenece al cliente")
    if consumo_m3 is None:
      consumo_m3 = lectura.consumo_m3
  if consumo_m3 is None:
    raise HTTPException(status_code=400, detail="Debe indicar consumo_m3 o una lectura")

  exists = session.exec(select(Factura.id).where(Factura.numero_factura == numero)).first()
  if exists:
    raise HTTPException(status_code=409, detail=NUMERO_DUPLICADO)

  try:
    importes = calcular_importes(
      zona,
      consumo_m3,
      descuentos=data.descuentos,
      recargos=data.recargos,
      alicuota_iva=request.app.state.settings.iva_alicuota,
    )
  except ImporteInvalidoError as e:
    raise HTTPException(status_code=400, detail=str(e))

  factura = Factura(
    numero_factura=numero,
    cliente_id=cliente.id,
    lectura_id=data.lectura_id,
    fecha_vencimiento=data.fecha_vencimiento,
    periodo_facturado_inicio=data.periodo_facturado_inicio,
    periodo_facturado_fin=data.periodo_facturado_fin,
    consumo_m3=redondear(consumo_m3),
    tarifa_basica=importes.tarifa_basica,
    tarifa_exceso=importes.tarifa_exceso,
    subtotal=importes.subtotal,
    descuentos=importes.descuentos,
    recargos=importes.recargos,
    impuestos=importes.impuestos,
    total=importes.total,
    estado_factura=EstadoFactura.PENDIENTE.value,
    metodo_pago=data.metodo_pago,
    observaciones=data.observaciones,
  )
  session.add(factura)
  commit_or_conflict(session, NUMERO_DUPLICADO)
  session.refresh(factura)

  logger.info("factura %s emitida para cliente %s, total %s", factura.numero_factura, cliente.id, factura.total)
  return {"message": "Factura creada exitosamente", "factura": factura.model_dump()}


@router.patch("/facturas/{factura_id}/pagar")
def pay_factura(factura_id: int, session: Session = Depends(get_session)):
  factura = session.get(Factura, factura_id)
  if not factura:
    raise HTTPException(status_code=404, detail="Factura no encontrada")

  try:
    marcar_pagada(factura)
  except FacturaYaPagadaError:
    raise HTTPException(status_code=400, detail="La factura ya está marcada como pagada")

  session.add(factura)
  session.commit()
  session.refresh(factura)

  logger.info("factura %s marcada como pagada sin pago registrado", factura_id)
  return {"message": "Factura marcada como pagada", "factura": factura.model_dump()}
