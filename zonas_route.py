# zonas_route.py
import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from db import get_session
from models import Zona

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["zonas"])

ZONAS_INICIALES = [
  ("Centro", "CEN", "Casco urbano central", "4500.00", "180.00"),
  ("Norte", "NOR", "Barrios del norte", "4200.00", "165.00"),
  ("Sur", "SUR", "Barrios del sur", "4200.00", "165.00"),
  ("Este", "EST", "Zona este y parque industrial", "5100.00", "210.00"),
  ("Oeste", "OES", "Zona oeste y periurbana", "3900.00", "150.00"),
]


def zona_activa(session: Session, zona_id: int):
  return session.exec(
    select(Zona).where(Zona.id == zona_id, Zona.estado == True)  # noqa: E712
  ).first()


@router.get("/zonas")
def list_zonas(session: Session = Depends(get_session)):
  rows = session.exec(
    select(Zona).where(Zona.estado == True).order_by(Zona.nombre)  # noqa: E712
  ).all()
  return [z.model_dump() for z in rows]


@router.get("/zonas/{zona_id}")
def get_zona(zona_id: int, session: Session = Depends(get_session)):
  zona = zona_activa(session, zona_id)
  if not zona:
    raise HTTPException(status_code=404, detail="Zona no encontrada")
  return zona.model_dump()


@router.post("/seed")
def seed_if_empty(session: Session = Depends(get_session)):
  # Seed only if there are no zones yet
  any_zona = session.exec(select(Zona)).first()
  if any_zona:
    return {"ok": True, "seeded": False}

  session.add_all([
    Zona(
      nombre=nombre,
      codigo=codigo,
      descripcion=descripcion,
      tarifa_basica=Decimal(basica),
      tarifa_exceso=Decimal(exceso),
    )
    for nombre, codigo, descripcion, basica, exceso in ZONAS_INICIALES
  ])
  session.commit()
  logger.info("zonas iniciales cargadas")
  return {"ok": True, "seeded": True}
