from recon.models.vendor import Vendor
from recon.models.customer import Customer
from recon.models.sku import SKU
from recon.models.purchase_order import PurchaseOrder
from recon.models.po_line import POLine
from recon.models.invoice import PurchaseInvoice
from recon.models.invoice_line import InvoiceLine
from recon.models.sales_invoice import SalesInvoice
from recon.models.bank_transaction import BankTransaction
from recon.models.payment_match import PaymentMatch
from recon.models.gst_return import GSTReturn, GSTReturnEntry
from recon.models.discount_term import DiscountTerm
from recon.models.matching_result import DocumentMatch, LineMatch
from recon.models.gst_match import GSTMatch
from recon.models.discount_audit import DiscountAudit
from recon.models.review_queue import ReviewQueue

__all__ = [
    "Vendor", "Customer", "SKU", "PurchaseOrder", "POLine", "PurchaseInvoice", "InvoiceLine",
    "SalesInvoice", "BankTransaction", "PaymentMatch", "GSTReturn", "GSTReturnEntry", "DiscountTerm",
    "DocumentMatch", "LineMatch", "GSTMatch", "DiscountAudit", "ReviewQueue",
]
