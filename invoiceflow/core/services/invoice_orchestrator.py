"""
Invoice orchestrator.

Layer-pure service coordinating classification, tax computation, numbering
and persistence for GST invoices.
NO infrastructure imports - depends only on core entities, interfaces, exceptions.
"""

from datetime import date, datetime
from decimal import Decimal

from invoiceflow.config import get_logger
from invoiceflow.core.entities.invoice import (
    OVERDUE,
    Invoice,
    InvoiceCreate,
    InvoiceLine,
    InvoiceStats,
    InvoiceStatus,
    InvoiceTotals,
    InvoiceUpdate,
    LineItemInput,
)
from invoiceflow.core.entities.party import ClientProfile, OwnerProfile
from invoiceflow.core.exceptions import (
    ClientNotFoundError,
    CompensationFailedError,
    InvalidStatusTransitionError,
    InvoiceLockedError,
    InvoiceNotFoundError,
    MissingStateCodeError,
    OwnerNotFoundError,
    ValidationError,
)
from invoiceflow.core.interfaces import IInvoiceStore, IPartyStore
from invoiceflow.core.services.amount_in_words import AmountInWordsConverter
from invoiceflow.core.services.invoice_sequencer import InvoiceSequencer
from invoiceflow.core.services.settlement_service import SettlementService
from invoiceflow.core.services.supply_classifier import (
    is_inter_state,
    parse_place_of_supply,
    state_code_from_gstin,
    validate_state_code,
)
from invoiceflow.core.services.tax_engine import TaxEngine

logger = get_logger(__name__)

Status = InvoiceStatus

# Overdue is derived from due_date, so it never appears here
ALLOWED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    Status.DRAFT: frozenset({Status.SENT, Status.CANCELLED}),
    Status.SENT: frozenset({Status.PAID, Status.CANCELLED}),
    Status.PAID: frozenset(),
    Status.CANCELLED: frozenset(),
}

RECOMPUTE_FIELDS = frozenset({"items", "client_id", "place_of_supply"})


def _parse_status(value: str | InvoiceStatus) -> InvoiceStatus:
    if isinstance(value, InvoiceStatus):
        return value
    try:
        return InvoiceStatus(str(value).strip().lower())
    except ValueError as e:
        if str(value).strip().lower() == OVERDUE:
            raise ValidationError(
                "status", "Overdue is derived from the due date and cannot be set", value
            ) from e
        raise ValidationError("status", "Unknown invoice status", value) from e


class InvoiceOrchestrator:
    """
    Create, update and track GST invoices.

    Required interfaces for DI:
    - IInvoiceStore: invoice header and line persistence
    - IPartyStore: owner and client profiles
    - InvoiceSequencer: invoice number allocation
    - SettlementService: optional, records a settlement when an invoice is paid
    """

    def __init__(
        self,
        invoice_store: IInvoiceStore,
        party_store: IPartyStore,
        sequencer: InvoiceSequencer,
        tax_engine: TaxEngine | None = None,
        words: AmountInWordsConverter | None = None,
        settlement_service: SettlementService | None = None,
        eway_bill_threshold: Decimal = Decimal("50000"),
        e_invoice_turnover_threshold: Decimal = Decimal("50000000"),
        default_unit: str = "NOS",
    ):
        self._invoices = invoice_store
        self._parties = party_store
        self._sequencer = sequencer
        self._tax = tax_engine or TaxEngine()
        self._words = words or AmountInWordsConverter()
        self._settlements = settlement_service
        self._eway_threshold = eway_bill_threshold
        self._e_invoice_threshold = e_invoice_turnover_threshold
        self._default_unit = default_unit

    # =========================================================================
    # Resolution helpers
    # =========================================================================

    async def _get_owner(self, owner_id: int) -> OwnerProfile:
        owner = await self._parties.get_owner(owner_id)
        if not owner:
            raise OwnerNotFoundError(owner_id)
        return owner

    async def _get_client(self, client_id: int, owner_id: int) -> ClientProfile:
        client = await self._parties.get_client(client_id, owner_id)
        if not client:
            raise ClientNotFoundError(client_id, owner_id)
        return client

    async def _get_invoice(self, invoice_id: int, owner_id: int) -> Invoice:
        invoice = await self._invoices.get_invoice(invoice_id, owner_id)
        if not invoice:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    def _resolve_state_codes(
        self,
        owner: OwnerProfile,
        client: ClientProfile,
        place_of_supply: str | None,
    ) -> tuple[str, str]:
        """
        Determine (owner_state, supply_state).

        The owner uses its state code, then its GSTIN prefix. An explicit
        place of supply decides the destination state; without one the
        client's state code, then its GSTIN prefix, is used.
        """
        owner_code = owner.state_code or (
            state_code_from_gstin(owner.gstin) if owner.gstin else None
        )
        if not owner_code:
            raise MissingStateCodeError("owner", owner.id)
        owner_code = validate_state_code(owner_code, "owner.state_code")

        pos_code = parse_place_of_supply(place_of_supply)
        if pos_code:
            return owner_code, validate_state_code(pos_code, "place_of_supply")

        client_code = client.state_code or (
            state_code_from_gstin(client.gstin) if client.gstin else None
        )
        if not client_code:
            raise MissingStateCodeError("client", client.id)
        return owner_code, validate_state_code(client_code, "client.state_code")

    def _prepare_items(self, items: list[LineItemInput]) -> list[LineItemInput]:
        return [
            item if item.unit else item.model_copy(update={"unit": self._default_unit})
            for item in items
        ]

    def _price(
        self,
        invoice: Invoice,
        owner: OwnerProfile,
        client: ClientProfile,
        place_of_supply: str | None,
        items: list[LineItemInput],
    ) -> tuple[list[InvoiceLine], InvoiceTotals]:
        """
        Classify, compute lines and totals, and apply them to the invoice.

        Pure with respect to storage; any validation error leaves the store
        untouched.
        """
        owner_code, supply_code = self._resolve_state_codes(owner, client, place_of_supply)

        inter_state = is_inter_state(owner_code, supply_code)
        lines = self._tax.compute_lines(self._prepare_items(items), inter_state)
        totals = self._tax.aggregate(lines)

        invoice.client_id = client.id
        invoice.place_of_supply = supply_code
        invoice.is_inter_state = inter_state
        invoice.apply_totals(totals)
        invoice.amount_in_words = self._words.to_words(totals.final_payable)
        invoice.eway_bill_required = Decimal(totals.final_payable) > self._eway_threshold
        invoice.e_invoice_required = (
            owner.annual_turnover is not None
            and owner.annual_turnover > self._e_invoice_threshold
        )
        return lines, totals

    @staticmethod
    def _check_dates(invoice: Invoice) -> None:
        if invoice.due_date and invoice.due_date < invoice.issue_date:
            raise ValidationError(
                "due_date", "Due date cannot be before the issue date", invoice.due_date
            )

    def _numbering_year(self, invoice: Invoice) -> int:
        """Year the invoice number was allocated in."""
        parsed = self._sequencer.parse_number(invoice.invoice_number)
        if parsed is None:
            return invoice.issue_date.year
        return parsed[0]

    @staticmethod
    def _check_numbering_year(invoice: Invoice, year: int) -> None:
        # Numbers are allocated per (owner, year) and are never re-issued
        if invoice.issue_date.year != year:
            raise ValidationError(
                "issue_date",
                f"Issue date must stay in {year}, the year invoice "
                f"{invoice.invoice_number} was numbered in",
                invoice.issue_date,
            )

    @staticmethod
    def _check_transition(invoice: Invoice, target: InvoiceStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[invoice.status]:
            raise InvalidStatusTransitionError("invoice", invoice.status.value, target.value)

    @staticmethod
    def _apply_status(invoice: Invoice, target: InvoiceStatus, paid_date: date | None) -> None:
        invoice.status = target
        if target == Status.PAID:
            invoice.paid_date = paid_date or date.today()
        elif target == Status.CANCELLED:
            invoice.paid_date = None

    async def _settle_if_paid(self, invoice: Invoice, previous: InvoiceStatus) -> None:
        if self._settlements is None or invoice.status != Status.PAID or previous == Status.PAID:
            return
        owner = await self._get_owner(invoice.owner_id)
        await self._settlements.record_for_invoice(invoice, owner)

    # =========================================================================
    # Create
    # =========================================================================

    async def create(self, owner_id: int, request: InvoiceCreate) -> Invoice:
        """
        Create a draft invoice.

        Validation, classification and tax computation all complete before
        the invoice number is allocated. If line items fail to persist the
        header is deleted again.

        Raises:
            ValidationError: On invalid input (nothing is written)
            OwnerNotFoundError, ClientNotFoundError: On unknown parties
            SequenceAllocationError: If numbering fails (nothing is written)
            CompensationFailedError: If the header could not be removed after
                a line item failure
        """
        owner = await self._get_owner(owner_id)
        client = await self._get_client(request.client_id, owner_id)

        invoice = Invoice(
            owner_id=owner_id,
            client_id=client.id,
            issue_date=request.issue_date or date.today(),
            due_date=request.due_date,
            supply_date=request.supply_date,
            reverse_charge=request.reverse_charge,
            notes=request.notes,
            terms_conditions=request.terms_conditions,
        )
        self._check_dates(invoice)
        lines, totals = self._price(invoice, owner, client, request.place_of_supply, request.items)

        year = invoice.issue_date.year
        invoice.sequence_number, invoice.invoice_number = await self._sequencer.allocate_number(
            owner_id, year
        )

        header = await self._invoices.insert_invoice(invoice)
        try:
            header.lines = await self._invoices.insert_line_items(header.id, lines)
        except Exception as e:
            logger.error(
                "invoice_line_items_failed",
                invoice_id=header.id,
                invoice_number=header.invoice_number,
                error=str(e),
            )
            try:
                await self._invoices.delete_invoice(header.id)
            except Exception as comp_err:
                logger.critical(
                    "invoice_compensation_failed",
                    invoice_id=header.id,
                    error=str(e),
                    compensation_error=str(comp_err),
                )
                raise CompensationFailedError(header.id, str(e), str(comp_err)) from comp_err
            raise

        logger.info(
            "invoice_created",
            invoice_id=header.id,
            invoice_number=header.invoice_number,
            owner_id=owner_id,
            is_inter_state=header.is_inter_state,
            grand_total=header.grand_total,
            lines=len(header.lines),
        )
        return header

    # =========================================================================
    # Update
    # =========================================================================

    async def update(self, invoice_id: int, owner_id: int, request: InvoiceUpdate) -> Invoice:
        """
        Apply a partial update.

        Paid and cancelled invoices are locked. New items, a new client or a
        new place of supply recompute every amount from scratch; otherwise
        amounts are untouched.
        """
        invoice = await self._get_invoice(invoice_id, owner_id)
        if invoice.is_closed:
            raise InvoiceLockedError(invoice_id, invoice.status.value, "edit")

        fields = request.model_fields_set
        previous = invoice.status
        numbered_year = self._numbering_year(invoice)

        target = None
        if "status" in fields and request.status is not None:
            target = _parse_status(request.status)
            if target != invoice.status:
                self._check_transition(invoice, target)
            else:
                target = None

        for name in ("issue_date", "due_date", "supply_date", "notes", "terms_conditions"):
            if name in fields:
                setattr(invoice, name, getattr(request, name))
        if "reverse_charge" in fields and request.reverse_charge is not None:
            invoice.reverse_charge = request.reverse_charge
        if invoice.issue_date is None:
            raise ValidationError("issue_date", "Issue date is required")
        self._check_numbering_year(invoice, numbered_year)
        self._check_dates(invoice)

        new_lines: list[InvoiceLine] | None = None
        if fields & RECOMPUTE_FIELDS:
            owner = await self._get_owner(owner_id)
            client_id = request.client_id if request.client_id is not None else invoice.client_id
            client = await self._get_client(client_id, owner_id)
            # A new client without an explicit place of supply is classified
            # from the new client, not from the previous client's state
            if "place_of_supply" in fields:
                place = request.place_of_supply
            elif "client_id" in fields:
                place = None
            else:
                place = invoice.place_of_supply
            items = request.items if request.items is not None else [
                LineItemInput.model_validate(line.model_dump(include=set(LineItemInput.model_fields)))
                for line in invoice.lines
            ]
            new_lines, _ = self._price(invoice, owner, client, place, items)

        if target is not None:
            self._apply_status(invoice, target, None)
        invoice.updated_at = datetime.utcnow()

        if new_lines is not None:
            await self._invoices.delete_line_items(invoice_id)
            updated = await self._invoices.update_invoice(invoice)
            updated.lines = await self._invoices.insert_line_items(invoice_id, new_lines)
        else:
            updated = await self._invoices.update_invoice(invoice)
            updated.lines = invoice.lines

        logger.info(
            "invoice_updated",
            invoice_id=invoice_id,
            recomputed=new_lines is not None,
            status=updated.status.value,
        )
        await self._settle_if_paid(updated, previous)
        return updated

    async def update_status(
        self,
        invoice_id: int,
        owner_id: int,
        status: str | InvoiceStatus,
        paid_date: date | None = None,
    ) -> Invoice:
        """
        Move an invoice through draft -> sent -> paid, or cancel it.

        Marking paid stamps paid_date (today by default) and, when a
        settlement service is wired in, records a pending settlement.

        Raises:
            ValidationError: For unknown statuses or "overdue"
            InvalidStatusTransitionError: For disallowed or same-state moves
        """
        target = _parse_status(status)
        invoice = await self._get_invoice(invoice_id, owner_id)
        self._check_transition(invoice, target)

        previous = invoice.status
        self._apply_status(invoice, target, paid_date)
        invoice.updated_at = datetime.utcnow()
        updated = await self._invoices.update_invoice(invoice)
        updated.lines = invoice.lines

        logger.info(
            "invoice_status_changed",
            invoice_id=invoice_id,
            from_status=previous.value,
            to_status=target.value,
        )
        await self._settle_if_paid(updated, previous)
        return updated

    # =========================================================================
    # Reads and delete
    # =========================================================================

    async def get_invoice(self, invoice_id: int, owner_id: int) -> Invoice:
        return await self._get_invoice(invoice_id, owner_id)

    async def list_invoices(
        self,
        owner_id: int,
        status: str | None = None,
        client_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        limit: int = 100,
        offset: int = 0,
        today: date | None = None,
    ) -> list[Invoice]:
        """
        List invoice headers.

        "overdue" filters draft/sent invoices past their due date; draft and
        sent exclude overdue ones so each invoice matches one status.
        """
        today = today or date.today()
        if status is None:
            return await self._invoices.list_invoices(
                owner_id,
                client_id=client_id,
                date_from=date_from,
                date_to=date_to,
                limit=limit,
                offset=offset,
            )

        if status.strip().lower() == OVERDUE:
            return await self._invoices.list_invoices(
                owner_id,
                statuses=[Status.DRAFT.value, Status.SENT.value],
                client_id=client_id,
                date_from=date_from,
                date_to=date_to,
                due_before=today,
                limit=limit,
                offset=offset,
            )

        target = _parse_status(status)
        invoices = await self._invoices.list_invoices(
            owner_id,
            statuses=[target.value],
            client_id=client_id,
            date_from=date_from,
            date_to=date_to,
            limit=None if target in (Status.DRAFT, Status.SENT) else limit,
            offset=0 if target in (Status.DRAFT, Status.SENT) else offset,
        )
        if target in (Status.DRAFT, Status.SENT):
            invoices = [i for i in invoices if not i.is_overdue(today)]
            invoices = invoices[offset : offset + limit]
        return invoices

    async def delete_invoice(self, invoice_id: int, owner_id: int) -> None:
        """Delete an invoice and its lines. Paid invoices cannot be deleted."""
        invoice = await self._get_invoice(invoice_id, owner_id)
        if invoice.status == Status.PAID:
            raise InvoiceLockedError(invoice_id, invoice.status.value, "delete")
        await self._invoices.delete_invoice(invoice_id)
        logger.info("invoice_deleted", invoice_id=invoice_id, owner_id=owner_id)

    async def get_stats(self, owner_id: int, today: date | None = None) -> InvoiceStats:
        """
        Counts and revenue for an owner's dashboard.

        Overdue invoices are counted as overdue only, never also as draft or
        sent. Revenue figures are in whole rupees.
        """
        today = today or date.today()
        invoices = await self._invoices.list_invoices(owner_id, limit=None)
        stats = InvoiceStats(total=len(invoices))

        for inv in invoices:
            amount = inv.grand_total
            if inv.is_overdue(today):
                stats.overdue += 1
            elif inv.status == Status.DRAFT:
                stats.draft += 1
            elif inv.status == Status.SENT:
                stats.sent += 1
            elif inv.status == Status.PAID:
                stats.paid += 1
            elif inv.status == Status.CANCELLED:
                stats.cancelled += 1

            stats.total_revenue += amount
            if inv.status == Status.PAID:
                stats.paid_revenue += amount
            elif inv.status != Status.CANCELLED:
                stats.unpaid_revenue += amount

            if (inv.issue_date.year, inv.issue_date.month) == (today.year, today.month):
                stats.this_month_revenue += amount
            if inv.paid_date and (inv.paid_date.year, inv.paid_date.month) == (
                today.year,
                today.month,
            ):
                stats.this_month_paid += amount

        return stats
