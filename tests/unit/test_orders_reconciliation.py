from unittest.mock import MagicMock

import pytest

from dropship.checkout.models import Customer
from dropship.orders.models import DraftOrder, OrderStatus
from dropship.orders.reconciliation import (
    NoConfirmation,
    PollResult,
    WebhookEvent,
    reconcile,
    target_status,
    transition,
)
from dropship.orders.repository import InMemoryOrderLedger

SUCCEEDED = WebhookEvent("payment_intent.succeeded", "pi_1")
FAILED = WebhookEvent("payment_intent.payment_failed", "pi_1")
OUTCOMES = [
    PollResult("pi_1", True),
    PollResult("pi_1", False),
    SUCCEEDED,
    FAILED,
    WebhookEvent("charge.refunded", "pi_1"),
    NoConfirmation("pi_1"),
]


def _ledger_with(reference="pi_1"):
    ledger = InMemoryOrderLedger()
    ledger.create_draft(DraftOrder(payment_reference=reference, gateway="stripe", customer=Customer()))
    return ledger


def test_target_status():
    assert target_status(PollResult("r", True)) is OrderStatus.PAID
    assert target_status(PollResult("r", False)) is None
    assert target_status(SUCCEEDED) is OrderStatus.PAID
    assert target_status(FAILED) is OrderStatus.FAILED
    assert target_status(WebhookEvent("customer.created", "r")) is None
    assert target_status(NoConfirmation("r")) is None


@pytest.mark.parametrize("terminal", [OrderStatus.PAID, OrderStatus.FAILED])
@pytest.mark.parametrize("outcome", OUTCOMES)
def test_terminal_states_are_absorbing(terminal, outcome):
    assert transition(terminal, outcome) is terminal


def test_pending_transitions():
    assert transition("pending", PollResult("r", True)) is OrderStatus.PAID
    assert transition("pending", PollResult("r", False)) is OrderStatus.PENDING
    assert transition("pending", FAILED) is OrderStatus.FAILED
    assert transition("pending", NoConfirmation("r")) is OrderStatus.PENDING


def test_reconcile_unknown_reference_returns_none():
    assert reconcile(InMemoryOrderLedger(), SUCCEEDED) is None
    assert reconcile(InMemoryOrderLedger(), WebhookEvent("payment_intent.succeeded", None)) is None


def test_reconcile_is_idempotent():
    ledger = _ledger_with()
    first = reconcile(ledger, SUCCEEDED)
    again = reconcile(ledger, SUCCEEDED)
    assert first.status is OrderStatus.PAID
    assert again.status is OrderStatus.PAID
    assert again.processed_at == first.processed_at


def test_reconcile_failed_then_success_stays_failed():
    ledger = _ledger_with()
    reconcile(ledger, FAILED)
    assert reconcile(ledger, PollResult("pi_1", True)).status is OrderStatus.FAILED


def test_reconcile_no_confirmation_leaves_pending():
    ledger = _ledger_with()
    assert reconcile(ledger, NoConfirmation("pi_1")).status is OrderStatus.PENDING


def test_reconcile_rereads_when_another_channel_won():
    ledger = _ledger_with()
    pending = ledger.get_by_reference("pi_1")
    paid = pending.model_copy(update={"status": OrderStatus.PAID})

    racing = MagicMock()
    racing.get_by_reference.side_effect = [pending, paid]
    racing.mark_failed.return_value = None

    assert reconcile(racing, FAILED).status is OrderStatus.PAID
    racing.mark_failed.assert_called_once_with("pi_1")
