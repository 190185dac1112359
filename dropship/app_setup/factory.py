"""
Factory d'application pour les entrypoints (ex: dropship.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI

from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middleware CORS
      - gestionnaires d'exceptions ({success: false, error})
      - routers checkout, orders, catalog, health
    """
    app = FastAPI(title="Dropship Checkout", lifespan=lifespan)
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
