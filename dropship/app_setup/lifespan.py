"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Client httpx sortant (timeout borné) et ledger des commandes, posés sur app.state.
- Ledger choisi par LEDGER_BACKEND ("supabase" par défaut, "memory" pour le dev local).
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
"""
import logging
import os
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from dropship import config
from dropship.infra.http_client import create_http_client
from dropship.orders.repository import InMemoryOrderLedger, SupabaseOrderLedger

# module dropship.app_setup.lifespan
def build_ledger():
    if config.LEDGER_BACKEND == "memory":
        return InMemoryOrderLedger()
    # Client Supabase créé à la première requête: le démarrage ne dépend pas du réseau
    return SupabaseOrderLedger()


async def init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d'échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            from fakeredis.aioredis import FakeRedis  # tests only
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    owns_http = getattr(app.state, "http", None) is None
    if owns_http:
        app.state.http = create_http_client()
    if getattr(app.state, "ledger", None) is None:
        app.state.ledger = build_ledger()
    logger.info("Order ledger backend=%s", type(app.state.ledger).__name__)

    await init_rate_limiter(app, logger)
    try:
        yield
    finally:
        if owns_http:
            app.state.http.close()
            app.state.http = None
