"""
Store interface the reconciliation components read from and write through.

Every read is scoped to an organization: a record that exists but belongs to a
different organization is reported as missing (NotFoundError).
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator, List, Optional, Sequence


class ReconciliationStore(ABC):
    """Abstract persistence boundary for the reconciliation engine"""

    # Transactions

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass

    @contextmanager
    def atomic(self) -> Iterator["ReconciliationStore"]:
        """Commit everything written inside the block, or nothing"""
        try:
            yield self
            self.commit()
        except Exception:
            self.rollback()
            raise

    # Records by id

    @abstractmethod
    def get_purchase_order(self, po_id: int, org_id: str):
        pass

    @abstractmethod
    def get_purchase_invoice(self, invoice_id: int, org_id: str):
        pass

    @abstractmethod
    def get_sales_invoice(self, invoice_id: int, org_id: str):
        pass

    @abstractmethod
    def get_bank_transaction(self, transaction_id: int, org_id: str):
        pass

    @abstractmethod
    def get_payment_allocation(self, allocation_id: int, org_id: str):
        pass

    @abstractmethod
    def get_gst_entry(self, entry_id: int, org_id: str):
        pass

    @abstractmethod
    def get_gst_return(self, return_id: int, org_id: str):
        pass

    @abstractmethod
    def get_document_match(self, match_id: int, org_id: str):
        pass

    @abstractmethod
    def get_review_item(self, item_id: int, org_id: str):
        pass

    # Catalog

    @abstractmethod
    def find_sku_by_code(self, org_id: str, sku_code: str):
        """Active catalog entry whose code equals sku_code, ignoring case"""

    @abstractmethod
    def find_sku_by_name(self, org_id: str, name: str):
        """Active catalog entry whose name equals name, ignoring case"""

    @abstractmethod
    def find_sku_by_alias(self, org_id: str, alias: str):
        """Active catalog entry carrying exactly this alias"""

    @abstractmethod
    def list_active_skus(self, org_id: str, limit: Optional[int] = None) -> List:
        pass

    @abstractmethod
    def append_sku_alias(self, sku_id: int, org_id: str, alias: str) -> bool:
        """Add alias under a row lock; False when it was already present"""

    # Candidate listings

    @abstractmethod
    def list_open_purchase_orders(self, org_id: str, vendor_id: int) -> List:
        """OPEN and PARTIALLY_FULFILLED orders of a vendor, newest first"""

    @abstractmethod
    def list_payable_invoices(
        self, org_id: str, invoice_kind: str, date_from: date, date_to: date, limit: int
    ) -> List:
        """UNPAID and PARTIALLY_PAID invoices of one kind dated inside the window, newest first"""

    @abstractmethod
    def list_books_invoices(
        self, org_id: str, gstin: str, date_from: Optional[date] = None, date_to: Optional[date] = None
    ) -> List:
        """Purchase invoices booked against a supplier GSTIN"""

    @abstractmethod
    def list_period_invoices(self, org_id: str, period_start: date, period_end: date) -> List:
        pass

    @abstractmethod
    def list_gst_entries(self, return_id: int) -> List:
        pass

    @abstractmethod
    def list_discount_terms(
        self, org_id: str, vendor_id: int, on_date: date, term_types: Sequence[str]
    ) -> List:
        """Active terms of the given kinds valid on on_date"""

    @abstractmethod
    def list_audit_invoices(self, org_id: str, vendor_id: int, statuses: Sequence[str], limit: int) -> List:
        pass

    @abstractmethod
    def list_pending_invoices(self, org_id: str, limit: int) -> List:
        pass

    @abstractmethod
    def list_discount_audits(self, org_id: str, vendor_id: Optional[int] = None) -> List:
        pass

    @abstractmethod
    def list_transaction_allocations(self, transaction_id: int) -> List:
        pass

    @abstractmethod
    def first_payment_date(self, invoice_id: int) -> Optional[date]:
        """Date of the earliest bank transaction allocated to a purchase invoice"""

    @abstractmethod
    def invoiced_quantity_for_po(self, po_id: int) -> Decimal:
        """Total quantity on the invoices currently matched to a purchase order"""

    # Writes

    @abstractmethod
    def save_document_match(self, record):
        """Insert or update the persisted PO/invoice match for this pair"""

    @abstractmethod
    def save_gst_match(self, record, org_id: str):
        pass

    @abstractmethod
    def save_discount_audit(self, evaluation, org_id: str):
        pass

    @abstractmethod
    def add_payment_allocation(
        self, transaction, invoice, invoice_kind: str, amount: Decimal, match_score: float,
        match_type: str, notes: Optional[str] = None
    ):
        pass

    @abstractmethod
    def delete_payment_allocation(self, allocation) -> None:
        pass

    @abstractmethod
    def update_invoice_payment(self, invoice, amount_paid: Decimal, payment_status: str) -> None:
        pass

    @abstractmethod
    def set_transaction_status(self, transaction, match_status: str) -> None:
        pass

    @abstractmethod
    def set_invoice_status(self, invoice, status: str) -> None:
        pass

    @abstractmethod
    def set_purchase_order_status(self, purchase_order, status: str) -> None:
        pass

    @abstractmethod
    def find_open_review_item(self, document_match_id: int):
        pass

    @abstractmethod
    def add_review_item(self, document_match_id: int, priority: str, issue_category: str, sla_deadline):
        pass

    @abstractmethod
    def resolve_review_item(self, item, document_match, resolution) -> None:
        pass
