import os

# Avant tout import de dropship: pas de Redis ni de Supabase pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ.setdefault("LEDGER_BACKEND", "memory")

import hashlib
import hmac
import json
import time
from typing import Any, Callable, Generator, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from dropship import config
from dropship import deps
from dropship.app import app as fastapi_app
from dropship.orders.repository import InMemoryOrderLedger

RATES_URL = "https://rates.test/v6/rate-key/latest/USD"
PAYSTACK_URL = "https://paystack.test"
OPAY_URL = "https://opay.test/api/v1/international/cashier"
WEBHOOK_SECRET = "whsec_test_secret"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)


class FakeUpstream:
    """Faux services HTTP sortants (passerelles, taux, fournisseur) branchés sur httpx.MockTransport."""

    def __init__(self):
        self.routes: List[Tuple[str, str, Callable[[httpx.Request], httpx.Response]]] = []
        self.requests: List[httpx.Request] = []

    def add(self, method: str, url_prefix: str, json_body: Any = None, status_code: int = 200,
            handler: Optional[Callable[[httpx.Request], httpx.Response]] = None) -> None:
        responder = handler or (lambda request: httpx.Response(status_code, json=json_body))
        self.routes.append((method.upper(), url_prefix, responder))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, prefix, responder in reversed(self.routes):
            if request.method == method and str(request.url).startswith(prefix):
                return responder(request)
        return httpx.Response(404, json={"status": False, "message": "no route"})

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def sent_json(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


def stripe_signature(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    t = timestamp or int(time.time())
    sig = hmac.new(secret.encode("utf-8"), f"{t}.{payload}".encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={t},v1={sig}"


@pytest.fixture(autouse=True)
def _gateway_config(monkeypatch):
    # Les adaptateurs lisent config.X à la construction (une fois par requête)
    monkeypatch.setattr(config, "EXCHANGE_RATE_API_KEY", "rate-key")
    monkeypatch.setattr(config, "EXCHANGE_RATE_BASE_URL", "https://rates.test/v6")
    monkeypatch.setattr(config, "PAYSTACK_SECRET_KEY", "sk_test_paystack")
    monkeypatch.setattr(config, "PAYSTACK_BASE_URL", PAYSTACK_URL)
    monkeypatch.setattr(config, "PAYSTACK_CALLBACK_URL", "")
    monkeypatch.setattr(config, "OPAY_BASE_URL", OPAY_URL)
    monkeypatch.setattr(config, "OPAY_PUBLIC_KEY", "OPAYPUB-test")
    monkeypatch.setattr(config, "OPAY_SECRET_KEY", "OPAYPRV-test")
    monkeypatch.setattr(config, "OPAY_CALLBACK_URL", "https://shop.test/opay/callback")
    monkeypatch.setattr(config, "OPAY_RETURN_URL", "https://shop.test/thanks")
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "sk_test_stripe")
    monkeypatch.setattr(config, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr(config, "SUPPLIER_STRIPE_ACCOUNT", "acct_supplier")
    monkeypatch.setattr(config, "SUPPLIER_API_URL", "")
    monkeypatch.setattr(config, "SUPPLIER_API_KEY", "")


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture
def upstream() -> FakeUpstream:
    fake = FakeUpstream()
    fake.add("GET", RATES_URL, {"result": "success", "conversion_rates": {"USD": 1, "NGN": 1500.0}})
    return fake


@pytest.fixture
def ledger() -> InMemoryOrderLedger:
    return InMemoryOrderLedger()


@pytest.fixture
def http(upstream) -> Generator[httpx.Client, None, None]:
    c = upstream.client()
    yield c
    c.close()


@pytest.fixture
def client(app, ledger, http) -> Generator[TestClient, None, None]:
    app.dependency_overrides[deps.get_ledger] = lambda: ledger
    app.dependency_overrides[deps.get_http] = lambda: http
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sign_webhook() -> Callable[..., str]:
    return stripe_signature
