# pagos_route.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session, col, select

from billing import FacturaYaPagadaError, ImporteInvalidoError, registrar_pago
from db import get_session
from models import Factura, Pago
from schemas import PagoIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pagos"])


@router.get("/pagos")
def list_pagos(factura_id: Optional[int] = None, session: Session = Depends(get_session)):
  q = (
    select(Pago, Factura)
    .outerjoin(Factura, Pago.factura_id == Factura.id)
    .order_by(col(Pago.fecha_pago).desc(), col(Pago.id).desc())
  )
  if factura_id is not None:
    q = q.where(Pago.factura_id == factura_id)

  rows = session.exec(q).all()
  return [
    {
      **p.model_dump(),
      "numero_factura": f.numero_factura if f else None,
      "cliente_id": f.cliente_id if f else None,
    }
    for p, f in rows
  ]


@router.post("/pagos", status_code=201)
def create_pago(data: PagoIn, request: Request, session: Session = Depends(get_session)):
  if not data.factura_id or data.monto_pagado is None:
    raise HTTPException(status_code=400, detail="Factura y monto son obligatorios")

  # lock the invoice row so concurrent payments settle one after the other
  factura = session.exec(
    select(Factura).where(Factura.id == data.factura_id).with_for_update()
  ).first()
  if not factura:
    raise HTTPException(status_code=404, detail="Factura no encontrada")

  try:
    pago = registrar_pago(
      session,
      factura,
      data.monto_pagado,
      metodo_pago=data.metodo_pago,
      observaciones=data.observaciones,
      modo=request.app.state.settings.modo_liquidacion,
    )
  except FacturaYaPagadaError:
    raise HTTPException(status_code=400, detail="La factura ya está pagada")
  except ImporteInvalidoError as e:
    raise HTTPException(status_code=400, detail=str(e))

  session.commit()
  session.refresh(pago)
  session.refresh(factura)

  logger.info("pago %s registrado para factura %s (%s)", pago.id, factura.id, pago.monto_pagado)
  return {
    "message": "Pago registrado correctamente",
    "pago": pago.model_dump(),
    "factura": factura.model_dump(),
  }
