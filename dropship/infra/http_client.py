"""
Client HTTP sortant (httpx) partagé par le process.
- Créé dans le lifespan, fermé à l'arrêt, injecté dans les adaptateurs via dropship.deps.
- Timeout borné (HTTP_TIMEOUT_SECONDS), aucun retry automatique.
"""
from typing import Optional

import httpx

from dropship import config

# module dropship.infra.http_client
def create_http_client(timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    return httpx.Client(
        timeout=timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
        headers={"Accept": "application/json"},
    )
