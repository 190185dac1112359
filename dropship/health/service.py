from datetime import datetime, timezone
import socket
from typing import Any, Dict
from urllib.parse import urlparse

from dropship import config
from dropship.infra.supabase_client import get_service_supabase
from dropship.orders.repository import ORDERS_TABLE
from dropship.catalog.repository import PRODUCTS_TABLE

# module dropship.health.service
def _check_table(client, name: str) -> Dict[str, Any]:
    # Diagnostic: l'erreur est rapportée dans la réponse, jamais levée
    try:
        res = client.table(name).select("*").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}


def health_info() -> Dict[str, Any]:
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


def health_supabase_info() -> Dict[str, Any]:
    """Connectivité Supabase: résolution DNS, client service-role, accès aux tables du ledger et du catalogue."""
    parsed = urlparse(config.SUPABASE_URL) if config.SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    info: Dict[str, Any] = {
        "supabase_url": config.SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": None,
        "dns_error": None,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            info["dns_ok"] = True
        except OSError as e:
            info["dns_ok"] = False
            info["dns_error"] = str(e)
    try:
        client = get_service_supabase()
        for t in (ORDERS_TABLE, PRODUCTS_TABLE):
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info
