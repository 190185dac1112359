import hashlib
import hmac
import json
import logging
from unittest.mock import MagicMock

import httpx
import pytest
import stripe

from dropship.checkout.cart import ProfitSplit
from dropship.checkout.models import Customer
from dropship.errors import ConfigurationError, UpstreamError, ValidationError
from dropship.gateways import OpayGateway, PaystackGateway, StripeGateway, new_opay_reference

CUSTOMER = Customer(name="Ada", email="ada@example.com", phone="0800", state="Lagos")


def _http(handler, sent):
    def _capture(request):
        sent.append(request)
        return handler(request)
    return httpx.Client(transport=httpx.MockTransport(_capture))


# --- OPay ---

def _opay(sent, handler=None, **kw):
    handler = handler or (lambda r: httpx.Response(200, json={"code": "00000", "data": {"cashierUrl": "https://pay"}}))
    params = dict(base_url="https://opay.test", public_key="OPAYPUB", secret_key="OPAYPRV",
                  callback_url="https://cb", return_url="https://ret")
    params.update(kw)
    return OpayGateway(_http(handler, sent), **params)


def test_opay_signature_covers_exact_body_bytes():
    sent = []
    raw = _opay(sent).create_invoice(reference="opay_ref_1", amount_kobo=2998500, customer=CUSTOMER)

    request = sent[0]
    expected = hmac.new(b"OPAYPRV", request.content, hashlib.sha512).hexdigest()
    assert request.headers["SIGNATURE"] == expected
    assert request.headers["Authorization"] == "Bearer OPAYPUB"
    assert str(request.url) == "https://opay.test/invoices/create"
    body = json.loads(request.content)
    assert body["amount"] == 2998500
    assert body["currency"] == "NGN"
    assert body["country"] == "NG"
    assert body["payType"] == "WEB"
    assert body["userInfo"] == {"userId": "ada@example.com", "name": "Ada"}
    # réponse stockée telle quelle
    assert raw == {"code": "00000", "data": {"cashierUrl": "https://pay"}}


def test_opay_missing_config_sends_nothing():
    sent = []
    with pytest.raises(ConfigurationError):
        _opay(sent, secret_key="").create_invoice(reference="r", amount_kobo=1, customer=CUSTOMER)
    assert sent == []


def test_opay_http_error_is_upstream_error():
    sent = []
    gw = _opay(sent, handler=lambda r: httpx.Response(502, text="bad gateway"))
    with pytest.raises(UpstreamError):
        gw.create_invoice(reference="r", amount_kobo=1, customer=CUSTOMER)


def test_opay_reference_format():
    ref = new_opay_reference()
    assert ref.startswith("opay_ref_")
    millis, suffix = ref[len("opay_ref_"):].split("_")
    assert millis.isdigit()
    assert len(suffix) == 8


def test_opay_references_differ_within_the_same_millisecond(monkeypatch):
    monkeypatch.setattr("dropship.gateways.opay_client.time.time", lambda: 1700000000.5)
    first, second = new_opay_reference(), new_opay_reference()
    assert first.startswith("opay_ref_1700000000500_")
    assert first != second


# --- Paystack ---

def _paystack(sent, handler, **kw):
    params = dict(secret_key="sk_test", base_url="https://paystack.test", callback_url="")
    params.update(kw)
    return PaystackGateway(_http(handler, sent), **params)


def test_paystack_initialize_payload_and_auth():
    sent = []
    ok = {"status": True, "data": {"authorization_url": "https://checkout.paystack.com/x", "reference": "ps_1"}}
    gw = _paystack(sent, lambda r: httpx.Response(200, json=ok), callback_url="https://shop/cb")

    init = gw.initialize(amount_kobo=4500, customer=Customer(), items=[{"id": "p1"}], shipping_fee=2500)

    assert init.reference == "ps_1"
    assert init.authorization_url.endswith("/x")
    request = sent[0]
    assert str(request.url) == "https://paystack.test/transaction/initialize"
    assert request.headers["Authorization"] == "Bearer sk_test"
    body = json.loads(request.content)
    assert body["email"] == "guest@example.com"
    assert body["amount"] == 4500
    assert body["currency"] == "NGN"
    assert body["callback_url"] == "https://shop/cb"
    assert body["metadata"]["shippingFee"] == 2500


@pytest.mark.parametrize("response", [
    httpx.Response(200, json={"status": False, "message": "Invalid key"}),
    httpx.Response(401, json={"status": False, "message": "Invalid key"}),
    httpx.Response(200, json={"status": True, "data": {}}),
])
def test_paystack_initialize_failures(response):
    with pytest.raises(UpstreamError):
        _paystack([], lambda r: response).initialize(
            amount_kobo=100, customer=CUSTOMER, items=[], shipping_fee=0
        )


def test_paystack_requires_secret_key():
    sent = []
    with pytest.raises(ConfigurationError):
        _paystack(sent, lambda r: httpx.Response(200), secret_key="").verify("ps_1")
    assert sent == []


@pytest.mark.parametrize("status,succeeded", [("success", True), ("failed", False), ("abandoned", False)])
def test_paystack_verify(status, succeeded):
    sent = []
    body = {"status": True, "data": {"status": status, "reference": "ps_1", "amount": 4500}}
    poll = _paystack(sent, lambda r: httpx.Response(200, json=body)).verify("ps_1")
    assert str(sent[0].url) == "https://paystack.test/transaction/verify/ps_1"
    assert poll.reference == "ps_1"
    assert poll.succeeded is succeeded
    assert poll.payload["amount"] == 4500


# --- Stripe ---

def test_stripe_build_request_with_connected_account():
    req = StripeGateway("sk", "", "acct_1").build_request(split=ProfitSplit(2000, 1200, 800), currency="USD")
    assert req.body["amount"] == 2000
    assert req.body["currency"] == "usd"
    assert req.body["application_fee_amount"] == 800
    assert req.body["transfer_data"] == {"destination": "acct_1"}


def test_stripe_build_request_without_account_omits_split(caplog):
    with caplog.at_level(logging.WARNING):
        req = StripeGateway("sk", "", "").build_request(split=ProfitSplit(2000, 1200, 800))
    assert "application_fee_amount" not in req.body
    assert "transfer_data" not in req.body
    assert "split omitted" in caplog.text


def test_stripe_create_intent(monkeypatch):
    create = MagicMock(return_value={
        "id": "pi_1", "client_secret": "pi_1_secret", "status": "requires_payment_method",
        "amount": 2000, "application_fee_amount": 800, "currency": "usd",
    })
    monkeypatch.setattr(stripe.PaymentIntent, "create", create)

    intent = StripeGateway("sk_test", "", "acct_1").create_intent(ProfitSplit(2000, 1200, 800))

    assert intent.client_secret == "pi_1_secret"
    assert intent.application_fee_amount == 800
    assert stripe.api_key == "sk_test"
    assert create.call_args.kwargs["automatic_payment_methods"] == {"enabled": True}


def test_stripe_sdk_error_is_upstream_error(monkeypatch):
    monkeypatch.setattr(stripe.PaymentIntent, "create", MagicMock(side_effect=stripe.StripeError("card declined")))
    with pytest.raises(UpstreamError):
        StripeGateway("sk_test", "", "").create_intent(ProfitSplit(2000, 1200, 800))


def test_stripe_requires_secret_key(monkeypatch):
    create = MagicMock()
    monkeypatch.setattr(stripe.PaymentIntent, "create", create)
    with pytest.raises(ConfigurationError):
        StripeGateway("", "", "").create_intent(ProfitSplit(2000, 1200, 800))
    create.assert_not_called()


@pytest.mark.parametrize("status,succeeded", [("succeeded", True), ("processing", False)])
def test_stripe_retrieve_intent(monkeypatch, status, succeeded):
    monkeypatch.setattr(stripe.PaymentIntent, "retrieve", MagicMock(return_value={
        "id": "pi_1", "status": status, "amount": 2000, "application_fee_amount": None, "currency": "usd",
    }))
    poll = StripeGateway("sk_test", "", "").retrieve_intent("pi_1")
    assert poll.succeeded is succeeded
    assert poll.payload.application_fee_amount is None


def test_stripe_webhook_verified(sign_webhook):
    payload = json.dumps({"id": "evt_1", "object": "event", "type": "payment_intent.succeeded",
                          "data": {"object": {"id": "pi_1", "object": "payment_intent"}}})
    gw = StripeGateway("sk_test", "whsec_test_secret", "")
    event = gw.parse_webhook(payload.encode(), sign_webhook(payload))
    assert event.event_type == "payment_intent.succeeded"
    assert event.reference == "pi_1"


def test_stripe_webhook_bad_signature():
    gw = StripeGateway("sk_test", "whsec_test_secret", "")
    with pytest.raises(ValidationError) as exc:
        gw.parse_webhook(b'{"type": "payment_intent.succeeded"}', "t=1,v1=deadbeef")
    assert exc.value.message.startswith("Webhook Error")


def test_stripe_webhook_without_secret_is_flagged(caplog):
    gw = StripeGateway("sk_test", "", "")
    body = {"type": "payment_intent.payment_failed", "data": {"object": {"id": "pi_9"}}}
    with caplog.at_level(logging.WARNING):
        event = gw.parse_webhook(json.dumps(body).encode(), None)
    assert event.reference == "pi_9"
    assert "NOT verified" in caplog.text


def test_stripe_webhook_without_secret_rejects_garbage():
    with pytest.raises(ValidationError):
        StripeGateway("sk_test", "", "").parse_webhook(b"not json", None)


def test_stripe_sdk_client_uses_bounded_timeout(monkeypatch):
    factory = MagicMock(return_value="bounded-client")
    monkeypatch.setattr(stripe, "default_http_client", None)
    monkeypatch.setattr(stripe, "new_default_http_client", factory)
    monkeypatch.setattr("dropship.config.HTTP_TIMEOUT_SECONDS", 15.0)

    StripeGateway("sk_test", "", "").require_stripe()
    StripeGateway("sk_test", "", "").require_stripe()

    factory.assert_called_once_with(timeout=15.0)
    assert stripe.default_http_client == "bounded-client"
