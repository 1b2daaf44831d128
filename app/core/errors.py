# app/core/errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from app.core.json import UTF8JSONResponse

log = logging.getLogger("uvicorn")


def _field_message(err: dict) -> str:
    loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
    field = ".".join(loc) or "request"
    return f"{field}: {err.get('msg', 'invalid value')}"


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Validación de payload → 400 (no 422) con mensaje por campo.
    """
    errors = exc.errors()
    detail = _field_message(errors[0]) if errors else "invalid request"
    return UTF8JSONResponse(
        status_code=400,
        content={
            "detail": detail,
            "errors": [
                {"field": ".".join(str(p) for p in e.get("loc", ())), "msg": e.get("msg")}
                for e in errors
            ],
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    # el detalle queda en el log, al cliente solo le llega el genérico
    log.exception("❌ %s %s falló: %r", request.method, request.url.path, exc)
    return UTF8JSONResponse(status_code=500, content={"detail": "internal error"})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
