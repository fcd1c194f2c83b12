"""
Middlewares transverses du bridge.
- CORS: l'app mobile/web appelle le bridge depuis d'autres origines.
- Pas de session ni de CSRF: chaque requête est autonome et ne porte aucun cookie.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import CORS_ORIGINS


def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
