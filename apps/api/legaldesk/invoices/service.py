from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from legaldesk.invoices.models import Invoice
from legaldesk.invoices.schemas import InvoiceCreate, InvoiceRead, InvoiceUpdate
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import Principal
from legaldesk.platform.store import store_guard


class InvoiceService(ResourceService[Invoice, InvoiceRead]):
    model = Invoice
    family = "invoice"
    label = "Invoice"
    sort_columns = ("created_at", "updated_at", "invoice_number", "status", "due_date", "amount")
    search_columns = ("invoice_number",)
    filter_columns = ("status", "case_id", "client_profile_id")

    def create(self, session: Session, actor: Principal, payload: InvoiceCreate) -> InvoiceRead:
        self._require_staff(actor, "create invoices")
        row = Invoice(**payload.model_dump(exclude_none=True))
        self._insert(
            session,
            actor,
            row,
            title="Invoice created",
            description=f"Amount: {payload.amount} {payload.currency}",
        )
        with store_guard(session, "invoice.create"):
            return self._to_read(session, row)

    def update_invoice(
        self,
        session: Session,
        actor: Principal,
        invoice_id: uuid.UUID,
        patch: InvoiceUpdate,
    ) -> InvoiceRead:
        self._require_staff(actor, "update invoices")
        return self.update(session, actor, invoice_id, patch)

    def _derive_changes(self, session: Session, row: Invoice, changes: dict[str, Any]) -> dict[str, Any]:
        if changes.get("status") == "paid" and row.status != "paid" and "paid_at" not in changes:
            changes = {**changes, "paid_at": datetime.now(timezone.utc)}
        return changes

    def _to_read(self, session: Session, row: Invoice) -> InvoiceRead:
        return InvoiceRead.model_validate(row)


invoice_service = InvoiceService()
