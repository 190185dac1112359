from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dropship import config

# module dropship.app_setup.middlewares
def register_basic_middlewares(app: FastAPI) -> None:
    """
    CORS pour le front (origines CORS_ORIGINS).
    Pas de cookies de session dans ce service: allow_credentials reste désactivé avec "*".
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
