"""Errors raised by the reconciliation components."""


class ReconciliationError(ValueError):
    """Base class for reconciliation failures"""


class NotFoundError(ReconciliationError):
    """A record does not exist or belongs to another organization"""

    def __init__(self, entity: str, entity_id, org_id: str = None):
        self.entity = entity
        self.entity_id = entity_id
        self.org_id = org_id
        scope = f" in organization {org_id}" if org_id else ""
        super().__init__(f"{entity} {entity_id} not found{scope}")


class VendorMismatchError(ReconciliationError):
    """Purchase order and invoice belong to different vendors"""

    def __init__(self, po_vendor_id, invoice_vendor_id):
        self.po_vendor_id = po_vendor_id
        self.invoice_vendor_id = invoice_vendor_id
        super().__init__(
            f"Vendor mismatch between PO and invoice: PO vendor {po_vendor_id}, invoice vendor {invoice_vendor_id}"
        )


class AllocationError(ReconciliationError):
    """A payment allocation would break an allocation invariant"""
