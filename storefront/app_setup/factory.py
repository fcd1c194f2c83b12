"""
Factory d'application pour les entrypoints (storefront.app, storefront.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI

from .lifespan import lifespan
from .middlewares import register_basic_middlewares
from .exceptions import register_exception_handlers
from .routers import register_routers


def create_app() -> FastAPI:
    """
    Construit l'app FastAPI du bridge de paiement avec le lifespan et enregistre:
      - middlewares (CORS)
      - gestionnaires d'exceptions ({"error": ...})
      - routers (payments, orders, health)
    """
    app = FastAPI(title="Storefront payment bridge", lifespan=lifespan)
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
