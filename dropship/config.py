# dropship.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend dropship.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, Paystack, OPay, taux de change)
- Les composants lisent `config.X` au moment de l'appel (jamais copié à l'import),
  ce qui permet aux tests de monkeypatcher une valeur.
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _float_env(name: str, default: float) -> float:
    raw = _clean_env(os.getenv(name) or "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default

# Supabase: ledger des commandes + catalogue produits
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# "supabase" en production, "memory" pour un ledger volatile (dev local, démo)
LEDGER_BACKEND = _clean_env(os.getenv("LEDGER_BACKEND") or "supabase").lower()

# Stripe (marketplace / Connect): clé secrète, secret webhook, compte connecté fournisseur
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
SUPPLIER_STRIPE_ACCOUNT = _clean_env(os.getenv("SUPPLIER_STRIPE_ACCOUNT") or "")

# API fournisseur (transfert de commande après paiement), optionnelle
SUPPLIER_API_URL = _clean_env(os.getenv("SUPPLIER_API_URL") or "")
SUPPLIER_API_KEY = _clean_env(os.getenv("SUPPLIER_API_KEY") or "")

# Paystack (checkout hébergé, NGN)
PAYSTACK_SECRET_KEY = _clean_env(os.getenv("PAYSTACK_SECRET_KEY") or "")
PAYSTACK_BASE_URL = _clean_env(os.getenv("PAYSTACK_BASE_URL") or "https://api.paystack.co").rstrip("/")
PAYSTACK_CALLBACK_URL = _clean_env(os.getenv("PAYSTACK_CALLBACK_URL") or "")

# OPay (mobile money, requêtes signées HMAC-SHA512)
OPAY_BASE_URL = _clean_env(os.getenv("OPAY_BASE_URL") or "").rstrip("/")
OPAY_PUBLIC_KEY = _clean_env(os.getenv("OPAY_PUBLIC_KEY") or "")
OPAY_SECRET_KEY = _clean_env(os.getenv("OPAY_SECRET_KEY") or "")
OPAY_CALLBACK_URL = _clean_env(os.getenv("OPAY_CALLBACK_URL") or "")
OPAY_RETURN_URL = _clean_env(os.getenv("OPAY_RETURN_URL") or "")

# Taux de change USD -> NGN (exchangerate-api.com v6)
EXCHANGE_RATE_API_KEY = _clean_env(os.getenv("EXCHANGE_RATE_API_KEY") or "")
EXCHANGE_RATE_BASE_URL = _clean_env(os.getenv("EXCHANGE_RATE_BASE_URL") or "https://v6.exchangerate-api.com/v6").rstrip("/")

# Timeout borné pour tous les appels sortants (passerelles, taux, fournisseur)
HTTP_TIMEOUT_SECONDS = _float_env("HTTP_TIMEOUT_SECONDS", 20.0)

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
