# clientes_route.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, col, select

from db import get_session
from errors import commit_or_conflict
from models import Cliente, Zona, utcnow
from schemas import ClienteIn
from zonas_route import zona_activa

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["clientes"])

CAMPOS_OBLIGATORIOS = "Los campos nombre, apellido, DNI/CUIT y dirección son obligatorios"
CONFLICTO_RELACIONES = (
  "No se puede eliminar el cliente porque tiene registros relacionados (facturas, lecturas, etc.)"
)


def _row(cliente: Cliente, zona_nombre: Optional[str]) -> dict:
  return {**cliente.model_dump(), "zona_nombre": zona_nombre}


def _clientes_con_zona():
  return (
    select(Cliente, Zona.nombre)
    .outerjoin(Zona, Cliente.zona_id == Zona.id)
    .order_by(col(Cliente.fecha_registro).desc(), col(Cliente.id).desc())
  )


def _cliente_activo(session: Session, cliente_id: int) -> Optional[Cliente]:
  return session.exec(
    select(Cliente).where(Cliente.id == cliente_id, Cliente.estado == True)  # noqa: E712
  ).first()


def _dni_en_uso(session: Session, dni_o_cuit: str, excluir_id: Optional[int] = None) -> bool:
  q = select(Cliente.id).where(Cliente.dni_o_cuit == dni_o_cuit, Cliente.estado == True)  # noqa: E712
  if excluir_id is not None:
    q = q.where(Cliente.id != excluir_id)
  return session.exec(q).first() is not None


def _clean(value: Optional[str]) -> Optional[str]:
  if value is None:
    return None
  value = value.strip()
  return value or None


def _validar(session: Session, data: ClienteIn, excluir_id: Optional[int] = None) -> dict:
  campos = {
    "nombre": _clean(data.nombre),
    "apellido": _clean(data.apellido),
    "dni_o_cuit": _clean(data.dni_o_cuit),
    "email": _clean(data.email),
    "telefono": _clean(data.telefono),
    "direccion": _clean(data.direccion),
    "ciudad": _clean(data.ciudad) or "No especificada",
    "codigo_postal": _clean(data.codigo_postal),
    "zona_id": data.zona_id or None,
  }
  if not all(campos[k] for k in ("nombre", "apellido", "dni_o_cuit", "direccion")):
    raise HTTPException(status_code=400, detail=CAMPOS_OBLIGATORIOS)

  if _dni_en_uso(session, campos["dni_o_cuit"], excluir_id):
    msg = "Ya existe otro cliente con ese DNI/CUIT" if excluir_id else "Ya existe un cliente con ese DNI/CUIT"
    raise HTTPException(status_code=409, detail=msg)

  if campos["zona_id"] and not zona_activa(session, campos["zona_id"]):
    raise HTTPException(status_code=400, detail="La zona especificada no existe")

  return campos


# /cleanup and /all are declared before /{cliente_id}
@router.delete("/clientes/cleanup")
def cleanup_clientes(session: Session = Depends(get_session)):
  inactivos = session.exec(
    select(Cliente).where(Cliente.estado == False)  # noqa: E712
  ).all()
  if not inactivos:
    return {"message": "No hay clientes desactivados para eliminar", "eliminados": 0}

  eliminados = [{"id": c.id, "nombre": c.nombre, "apellido": c.apellido} for c in inactivos]
  for cliente in inactivos:
    session.delete(cliente)
  # all or nothing
  commit_or_conflict(
    session,
    "No se pueden eliminar los clientes desactivados porque alguno tiene registros relacionados",
  )

  logger.info("%s clientes desactivados eliminados", len(eliminados))
  return {
    "message": f"{len(eliminados)} clientes eliminados permanentemente",
    "eliminados": len(eliminados),
    "clientes": eliminados,
  }


@router.get("/clientes")
def list_clientes(session: Session = Depends(get_session)):
  rows = session.exec(_clientes_con_zona().where(Cliente.estado == True)).all()  # noqa: E712
  return [_row(c, zona_nombre) for c, zona_nombre in rows]


@router.get("/clientes/all")
def list_all_clientes(session: Session = Depends(get_session)):
  rows = session.exec(_clientes_con_zona()).all()
  return [
    {**_row(c, zona_nombre), "estado_texto": "Activo" if c.estado else "Eliminado"}
    for c, zona_nombre in rows
  ]


@router.get("/clientes/{cliente_id}")
def get_cliente(cliente_id: int, session: Session = Depends(get_session)):
  row = session.exec(
    _clientes_con_zona().where(Cliente.id == cliente_id, Cliente.estado == True)  # noqa: E712
  ).first()
  if not row:
    raise HTTPException(status_code=404, detail="Cliente no encontrado")
  cliente, zona_nombre = row
  return _row(cliente, zona_nombre)


@router.post("/clientes", status_code=201)
def create_cliente(data: ClienteIn, session: Session = Depends(get_session)):
  cliente = Cliente(**_validar(session, data))
  session.add(cliente)
  commit_or_conflict(session, "Ya existe un cliente con ese DNI/CUIT")
  session.refresh(cliente)

  logger.info("cliente %s creado", cliente.id)
  return {"message": "Cliente creado exitosamente", "cliente": cliente.model_dump()}


@router.put("/clientes/{cliente_id}")
def update_cliente(cliente_id: int, data: ClienteIn, session: Session = Depends(get_session)):
  cliente = _cliente_activo(session, cliente_id)
  if not cliente:
    raise HTTPException(status_code=404, detail="Cliente no encontrado")

  for key, value in _validar(session, data, excluir_id=cliente_id).items():
    setattr(cliente, key, value)
  cliente.fecha_modificacion = utcnow()

  session.add(cliente)
  commit_or_conflict(session, "Ya existe otro cliente con ese DNI/CUIT")
  session.refresh(cliente)

  logger.info("cliente %s actualizado", cliente.id)
  return {"message": "Cliente actualizado exitosamente", "cliente": cliente.model_dump()}


@router.delete("/clientes/{cliente_id}")
def delete_cliente(cliente_id: int, session: Session = Depends(get_session)):
  cliente = _cliente_activo(session, cliente_id)
  if not cliente:
    raise HTTPException(status_code=404, detail="Cliente no encontrado")

  session.delete(cliente)
  commit_or_conflict(session, CONFLICTO_RELACIONES)

  logger.info("cliente %s eliminado físicamente", cliente_id)
  return {"message": "Cliente eliminado exitosamente"}


@router.patch("/clientes/{cliente_id}/restore")
def restore_cliente(cliente_id: int, session: Session = Depends(get_session)):
  cliente = session.exec(
    select(Cliente).where(Cliente.id == cliente_id, Cliente.estado == False)  # noqa: E712
  ).first()
  if not cliente:
    raise HTTPException(status_code=404, detail="Cliente no encontrado o ya está activo")

  if _dni_en_uso(session, cliente.dni_o_cuit):
    raise HTTPException(status_code=409, detail="Ya existe un cliente activo con ese DNI/CUIT")

  cliente.estado = True
  cliente.fecha_modificacion = utcnow()
  session.add(cliente)
  commit_or_conflict(session, "Ya existe un cliente activo con ese DNI/CUIT")
  session.refresh(cliente)

  logger.info("cliente %s restaurado", cliente_id)
  return {"message": "Cliente restaurado exitosamente", "cliente": cliente.model_dump()}


@router.patch("/clientes/{cliente_id}/deactivate")
def deactivate_cliente(cliente_id: int, session: Session = Depends(get_session)):
  cliente = _cliente_activo(session, cliente_id)
  if not cliente:
    raise HTTPException(status_code=404, detail="Cliente no encontrado")

  cliente.estado = False
  cliente.fecha_modificacion = utcnow()
  session.add(cliente)
  session.commit()
  session.refresh(cliente)

  logger.info("cliente %s desactivado", cliente_id)
  return {"message": "Cliente desactivado exitosamente", "cliente": cliente.model_dump()}
