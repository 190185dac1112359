from typing import Optional
from supabase import create_client, Client
from dropship import config
from dropship.errors import ConfigurationError

_service_supabase: Optional[Client] = None

def get_service_supabase() -> Client:
    """
    Client Supabase service-role (bypass RLS), partagé par le process.
    - Créé à la première utilisation: le démarrage de l'app ne dépend pas de Supabase.
    - ConfigurationError si SUPABASE_URL ou SUPABASE_SERVICE_KEY manque.
    """
    global _service_supabase
    if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_KEY:
        raise ConfigurationError("SUPABASE_URL / SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY)
    return _service_supabase
