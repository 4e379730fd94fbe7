"""
Settlement record service.

Creates the pending payout record for a paid invoice and moves it through
its lifecycle. Layer-pure: stores and calculator are injected.
"""

from datetime import datetime

from invoiceflow.config import get_logger
from invoiceflow.core.entities.invoice import Invoice, InvoiceStatus
from invoiceflow.core.entities.party import OwnerProfile
from invoiceflow.core.entities.settlement import SettlementRecord, SettlementStatus
from invoiceflow.core.exceptions import (
    InvalidStatusTransitionError,
    SettlementError,
    SettlementNotFoundError,
    ValidationError,
)
from invoiceflow.core.interfaces import ISettlementStore
from invoiceflow.core.services.settlement_calculator import SettlementCalculator

logger = get_logger(__name__)

S = SettlementStatus

ALLOWED_TRANSITIONS: dict[SettlementStatus, frozenset[SettlementStatus]] = {
    S.PENDING: frozenset({S.INITIATED, S.FAILED}),
    S.INITIATED: frozenset({S.PROCESSED, S.FAILED}),
    S.PROCESSED: frozenset({S.SETTLED, S.FAILED}),
    S.SETTLED: frozenset({S.REVERSED}),
    S.FAILED: frozenset(),
    S.REVERSED: frozenset(),
}


class SettlementService:
    """
    Settlement records for paid invoices.

    Required interfaces for DI:
    - ISettlementStore: record persistence
    - SettlementCalculator: fee breakdown
    """

    def __init__(self, store: ISettlementStore, calculator: SettlementCalculator):
        self._store = store
        self._calculator = calculator

    async def record_for_invoice(
        self, invoice: Invoice, owner: OwnerProfile
    ) -> SettlementRecord:
        """
        Create the pending settlement for a paid invoice.

        Idempotent per invoice: an existing record is returned unchanged.
        """
        if invoice.status != InvoiceStatus.PAID:
            raise SettlementError(
                "invoice is not paid",
                {"invoice_id": invoice.id, "status": invoice.status.value},
            )

        existing = await self._store.get_settlement_by_invoice(invoice.id)
        if existing:
            return existing

        breakdown = self._calculator.calculate(invoice.grand_total, owner.commission_rate)
        record = SettlementRecord.from_breakdown(invoice.id, invoice.owner_id, breakdown)
        created = await self._store.create_settlement(record)

        logger.info(
            "settlement_recorded",
            settlement_id=created.id,
            invoice_id=invoice.id,
            owner_id=invoice.owner_id,
            gross=str(breakdown.invoice_amount),
            net=str(breakdown.net_amount),
        )
        return created

    async def get_settlement(
        self, settlement_id: int, owner_id: int | None = None
    ) -> SettlementRecord:
        record = await self._store.get_settlement(settlement_id)
        if not record or (owner_id is not None and record.owner_id != owner_id):
            raise SettlementNotFoundError(settlement_id=settlement_id)
        return record

    async def get_for_invoice(self, invoice_id: int, owner_id: int) -> SettlementRecord:
        record = await self._store.get_settlement_by_invoice(invoice_id)
        if not record or record.owner_id != owner_id:
            raise SettlementNotFoundError(invoice_id=invoice_id)
        return record

    async def list_settlements(
        self,
        owner_id: int,
        status: SettlementStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[SettlementRecord]:
        return await self._store.list_settlements(owner_id, status, limit, offset)

    async def update_status(
        self,
        settlement_id: int,
        status: SettlementStatus,
        transfer_reference: str | None = None,
        failure_reason: str | None = None,
        owner_id: int | None = None,
    ) -> SettlementRecord:
        """
        Move a settlement to a new status.

        initiated stamps initiated_at, settled stamps settled_at, failed
        requires a reason.

        Raises:
            SettlementNotFoundError: If the record does not exist
            InvalidStatusTransitionError: If the move is not allowed
            ValidationError: If failing without a reason
        """
        record = await self.get_settlement(settlement_id, owner_id)
        status = SettlementStatus(status)

        if status not in ALLOWED_TRANSITIONS[record.status]:
            raise InvalidStatusTransitionError("settlement", record.status.value, status.value)

        now = datetime.utcnow()
        if status == S.FAILED:
            if not failure_reason:
                raise ValidationError("failure_reason", "A reason is required to fail a settlement")
            record.failure_reason = failure_reason
        if status == S.INITIATED:
            record.initiated_at = now
        if status == S.SETTLED:
            record.settled_at = now
        if transfer_reference:
            record.transfer_reference = transfer_reference

        previous = record.status
        record.status = status
        record.updated_at = now
        updated = await self._store.update_settlement(record)

        logger.info(
            "settlement_status_changed",
            settlement_id=settlement_id,
            from_status=previous.value,
            to_status=status.value,
        )
        return updated
