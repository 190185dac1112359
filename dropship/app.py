# module dropship.app
"""
Instance FastAPI unique du service, construite par la factory (dropship.app_setup.factory).
Importée par dropship.asgi et par les tests.
"""
from dropship.app_setup.factory import create_app

app = create_app()
