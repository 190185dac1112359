"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn -k uvicorn.workers.UvicornWorker) importe
  `dropship.asgi:app`.
- Toute la configuration FastAPI est centralisée dans dropship.app_setup.factory.
"""

from dropship.app import app
