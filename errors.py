# errors.py
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Error interno del servidor"


def error_response(status_code: int, message: str) -> JSONResponse:
  return JSONResponse(status_code=status_code, content={"error": message})


def commit_or_conflict(session: Session, message: str) -> None:
  try:
    session.commit()
  except IntegrityError as exc:
    session.rollback()
    logger.warning("integrity conflict: %s", exc.orig)
    raise HTTPException(status_code=409, detail=message) from exc


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
  return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
  errors = exc.errors()
  if any(e.get("loc", ("",))[0] == "path" for e in errors):
    return error_response(400, "ID inválido")

  if not errors:
    return error_response(400, "Datos inválidos")
  first = errors[0]
  field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
  return error_response(400, f"Campo inválido '{field}': {first.get('msg', 'valor inválido')}")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
  logger.exception("unhandled error on %s %s", request.method, request.url.path)
  return error_response(500, INTERNAL_ERROR)


def register_error_handlers(app: FastAPI) -> None:
  app.add_exception_handler(StarletteHTTPException, http_exception_handler)
  app.add_exception_handler(RequestValidationError, validation_exception_handler)
  app.add_exception_handler(Exception, unhandled_exception_handler)
