"""
Gestionnaire d'exceptions utilisé par la factory.
- Toute HTTPException (levée par les vues ou par Starlette: 404, 405, 429) est rendue {"error": detail},
  forme attendue par l'app cliente.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def error_envelope(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
