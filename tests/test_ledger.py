from dataclasses import replace
from decimal import Decimal

import pytest

from services.fees import PaymentMethod
from services.ledger import (
    InvalidTransition,
    LedgerError,
    TransactionLedger,
    TransactionStatus,
)


@pytest.fixture
def ledger():
    return TransactionLedger()


def test_create_then_list_by_user(ledger):
    txn = ledger.create(42, "plan_1", "33.12", "pix")
    other = ledger.create(7, "plan_2", 10, "boleto")

    items = ledger.list_by_user(42)
    assert items == [txn]
    assert txn.status is TransactionStatus.PENDING
    assert txn.amount == Decimal("33.12")
    assert txn.currency == "BRL"
    assert txn.payment_method is PaymentMethod.PIX
    assert txn.completed_at is None
    assert txn.id.startswith("txn_") and txn.asaas_payment_id.startswith("asaas_")
    assert txn.id != other.id
    assert len(ledger.list_all()) == 2


def test_completed_sets_timestamp_and_keeps_other_fields(ledger):
    txn = ledger.create(1, "plan_3", "150.00", "credit_card")
    done = ledger.update_status(txn.id, "completed")

    assert done.status is TransactionStatus.COMPLETED
    assert done.completed_at is not None
    assert replace(done, status=txn.status, completed_at=None) == txn
    assert ledger.get(txn.id) == done


def test_processing_does_not_set_completed_at(ledger):
    txn = ledger.create(1, "plan_1", 10, "pix")
    processing = ledger.update_status(txn.id, TransactionStatus.PROCESSING)
    assert processing.completed_at is None


def test_missing_transaction_is_not_an_error(ledger):
    assert ledger.get("txn_nao_existe") is None
    assert ledger.update_status("txn_nao_existe", "completed") is None
    assert ledger.list_by_user(999) == []


@pytest.mark.parametrize("terminal", ["completed", "failed", "cancelled"])
def test_terminal_states_are_immutable(ledger, terminal):
    txn = ledger.create(1, "plan_1", 10, "pix")
    final = ledger.update_status(txn.id, terminal)
    for status in ("pending", "processing", "completed", "failed", "cancelled"):
        with pytest.raises(InvalidTransition):
            ledger.update_status(txn.id, status)
    assert ledger.get(txn.id) == final


def test_status_cannot_move_backwards(ledger):
    txn = ledger.create(1, "plan_1", 10, "pix")
    ledger.update_status(txn.id, "processing")
    with pytest.raises(InvalidTransition):
        ledger.update_status(txn.id, "pending")
    with pytest.raises(InvalidTransition):
        ledger.update_status(txn.id, "processing")


@pytest.mark.parametrize("amount", [0, -1, "abc", None])
def test_create_rejects_invalid_amount(ledger, amount):
    with pytest.raises(LedgerError):
        ledger.create(1, "plan_1", amount, "pix")
    assert ledger.list_all() == []


def test_unknown_status_is_rejected(ledger):
    txn = ledger.create(1, "plan_1", 10, "pix")
    with pytest.raises(LedgerError):
        ledger.update_status(txn.id, "refunded")
