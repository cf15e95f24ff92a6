from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol

from services.date_utils import utcnow
from services.fees import PaymentMethod
from services.money import quantize_money, to_decimal

logger = logging.getLogger(__name__)


class LedgerError(ValueError):
    pass


class InvalidTransition(LedgerError):
    pass


class TransactionStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @classmethod
    def parse(cls, value) -> "TransactionStatus":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for status in cls:
            if status.value == text:
                return status
        raise LedgerError(f"Status inválido: {value!r}")


TERMINAL_STATUSES = frozenset(
    {TransactionStatus.COMPLETED, TransactionStatus.FAILED, TransactionStatus.CANCELLED}
)

_STAGE = {
    TransactionStatus.PENDING: 0,
    TransactionStatus.PROCESSING: 1,
    TransactionStatus.COMPLETED: 2,
    TransactionStatus.FAILED: 2,
    TransactionStatus.CANCELLED: 2,
}


@dataclass(frozen=True)
class PaymentTransaction:
    id: str
    user_id: int
    plan_id: str
    amount: Decimal
    currency: str
    status: TransactionStatus
    payment_method: PaymentMethod
    created_at: datetime
    asaas_payment_id: str
    completed_at: datetime | None = None


class TransactionStore(Protocol):
    def add(self, txn: PaymentTransaction) -> PaymentTransaction: ...

    def get(self, txn_id: str) -> PaymentTransaction | None: ...

    def save(self, txn: PaymentTransaction) -> PaymentTransaction: ...

    def select(self, user_id: int | None = None) -> list[PaymentTransaction]: ...


class InMemoryTransactionStore:
    def __init__(self) -> None:
        self._items: dict[str, PaymentTransaction] = {}

    def add(self, txn: PaymentTransaction) -> PaymentTransaction:
        if txn.id in self._items:
            raise LedgerError(f"Transação duplicada: {txn.id}")
        self._items[txn.id] = txn
        return txn

    def get(self, txn_id: str) -> PaymentTransaction | None:
        return self._items.get(txn_id)

    def save(self, txn: PaymentTransaction) -> PaymentTransaction:
        self._items[txn.id] = txn
        return txn

    def select(self, user_id: int | None = None) -> list[PaymentTransaction]:
        items = list(self._items.values())
        if user_id is None:
            return items
        return [t for t in items if t.user_id == user_id]


def new_transaction_id() -> str:
    return f"txn_{uuid.uuid4().hex}"


def new_gateway_reference() -> str:
    return f"asaas_{secrets.token_hex(6)}"


def check_transition(current: TransactionStatus, new: TransactionStatus) -> None:
    if current.is_terminal:
        raise InvalidTransition(f"Transação já finalizada ({current.value}).")
    if _STAGE[new] <= _STAGE[current]:
        raise InvalidTransition(f"Transição inválida: {current.value} -> {new.value}.")


class TransactionLedger:
    """Registro de transações de pagamento (append-only).

    Uma transação nasce ``pending`` e só avança; status terminais
    (completed/failed/cancelled) não aceitam novas alterações.
    """

    def __init__(self, store: TransactionStore | None = None) -> None:
        self.store = store if store is not None else InMemoryTransactionStore()

    def create(self, user_id: int, plan_id: str, amount_brl, method) -> PaymentTransaction:
        amount = to_decimal(amount_brl)
        if amount is None or amount <= 0:
            raise LedgerError("O valor da transação deve ser maior que zero.")
        if not plan_id:
            raise LedgerError("plan_id obrigatório.")

        txn = PaymentTransaction(
            id=new_transaction_id(),
            user_id=int(user_id),
            plan_id=str(plan_id),
            amount=quantize_money(amount),
            currency="BRL",
            status=TransactionStatus.PENDING,
            payment_method=PaymentMethod.parse(method),
            created_at=utcnow(),
            asaas_payment_id=new_gateway_reference(),
        )
        self.store.add(txn)
        logger.info("Transação %s criada (user=%s, plano=%s)", txn.id, txn.user_id, txn.plan_id)
        return txn

    def get(self, txn_id: str) -> PaymentTransaction | None:
        if not txn_id:
            return None
        return self.store.get(txn_id)

    def update_status(self, txn_id: str, new_status) -> PaymentTransaction | None:
        status = TransactionStatus.parse(new_status)
        txn = self.get(txn_id)
        if txn is None:
            return None

        check_transition(txn.status, status)

        completed_at = utcnow() if status is TransactionStatus.COMPLETED else None
        updated = replace(txn, status=status, completed_at=completed_at)
        self.store.save(updated)
        logger.info("Transação %s: %s -> %s", txn.id, txn.status.value, status.value)
        return updated

    def list_by_user(self, user_id: int) -> list[PaymentTransaction]:
        return self.store.select(user_id=int(user_id))

    def list_all(self) -> list[PaymentTransaction]:
        return self.store.select()
