"""Initial migration

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create vendors table
    op.create_table(
        'vendors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('gstin', sa.String(15), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_vendors_id'), 'vendors', ['id'], unique=False)
    op.create_index(op.f('ix_vendors_org_id'), 'vendors', ['org_id'], unique=False)
    op.create_index(op.f('ix_vendors_name'), 'vendors', ['name'], unique=False)
    op.create_index(op.f('ix_vendors_gstin'), 'vendors', ['gstin'], unique=False)

    # Create customers table
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('gstin', sa.String(15), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_customers_id'), 'customers', ['id'], unique=False)
    op.create_index(op.f('ix_customers_org_id'), 'customers', ['org_id'], unique=False)

    # Create skus table
    op.create_table(
        'skus',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('sku_code', sa.String(64), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('hsn_code', sa.String(16), nullable=True),
        sa.Column('aliases', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('org_id', 'sku_code', name='uq_skus_org_code')
    )
    op.create_index(op.f('ix_skus_id'), 'skus', ['id'], unique=False)
    op.create_index(op.f('ix_skus_org_id'), 'skus', ['org_id'], unique=False)
    op.create_index(op.f('ix_skus_sku_code'), 'skus', ['sku_code'], unique=False)

    # Create purchase_orders table
    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('po_number', sa.String(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('po_date', sa.Date(), nullable=False),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_with_gst', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(24), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_purchase_orders_id'), 'purchase_orders', ['id'], unique=False)
    op.create_index(op.f('ix_purchase_orders_org_id'), 'purchase_orders', ['org_id'], unique=False)
    op.create_index(op.f('ix_purchase_orders_po_number'), 'purchase_orders', ['po_number'], unique=False)
    op.create_index(op.f('ix_purchase_orders_status'), 'purchase_orders', ['status'], unique=False)

    # Create po_lines table
    op.create_table(
        'po_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('po_id', sa.Integer(), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('sku_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('hsn_code', sa.String(16), nullable=True),
        sa.Column('quantity', sa.Numeric(14, 3), nullable=False),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.ForeignKeyConstraint(['po_id'], ['purchase_orders.id'], ),
        sa.ForeignKeyConstraint(['sku_id'], ['skus.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_po_lines_id'), 'po_lines', ['id'], unique=False)
    op.create_index(op.f('ix_po_lines_sku_id'), 'po_lines', ['sku_id'], unique=False)

    # Create purchase_invoices table
    op.create_table(
        'purchase_invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('invoice_number', sa.String(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('vendor_gstin', sa.String(15), nullable=True),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('cgst_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('sgst_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('igst_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_with_gst', sa.Numeric(14, 2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(24), nullable=True),
        sa.Column('payment_status', sa.String(24), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_purchase_invoices_id'), 'purchase_invoices', ['id'], unique=False)
    op.create_index(op.f('ix_purchase_invoices_org_id'), 'purchase_invoices', ['org_id'], unique=False)
    op.create_index(op.f('ix_purchase_invoices_invoice_number'), 'purchase_invoices', ['invoice_number'], unique=False)
    op.create_index(op.f('ix_purchase_invoices_vendor_gstin'), 'purchase_invoices', ['vendor_gstin'], unique=False)
    op.create_index(op.f('ix_purchase_invoices_status'), 'purchase_invoices', ['status'], unique=False)
    op.create_index(op.f('ix_purchase_invoices_payment_status'), 'purchase_invoices', ['payment_status'], unique=False)

    # Create invoice_lines table
    op.create_table(
        'invoice_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('sku_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('hsn_code', sa.String(16), nullable=True),
        sa.Column('quantity', sa.Numeric(14, 3), nullable=False),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.ForeignKeyConstraint(['invoice_id'], ['purchase_invoices.id'], ),
        sa.ForeignKeyConstraint(['sku_id'], ['skus.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_invoice_lines_id'), 'invoice_lines', ['id'], unique=False)
    op.create_index(op.f('ix_invoice_lines_sku_id'), 'invoice_lines', ['sku_id'], unique=False)

    # Create sales_invoices table
    op.create_table(
        'sales_invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('invoice_number', sa.String(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_with_gst', sa.Numeric(14, 2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(14, 2), nullable=False),
        sa.Column('payment_status', sa.String(24), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sales_invoices_id'), 'sales_invoices', ['id'], unique=False)
    op.create_index(op.f('ix_sales_invoices_org_id'), 'sales_invoices', ['org_id'], unique=False)
    op.create_index(op.f('ix_sales_invoices_invoice_number'), 'sales_invoices', ['invoice_number'], unique=False)
    op.create_index(op.f('ix_sales_invoices_payment_status'), 'sales_invoices', ['payment_status'], unique=False)

    # Create bank_transactions table
    op.create_table(
        'bank_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('transaction_date', sa.Date(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('reference_number', sa.String(), nullable=True),
        sa.Column('debit', sa.Numeric(14, 2), nullable=True),
        sa.Column('credit', sa.Numeric(14, 2), nullable=True),
        sa.Column('match_status', sa.String(24), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bank_transactions_id'), 'bank_transactions', ['id'], unique=False)
    op.create_index(op.f('ix_bank_transactions_org_id'), 'bank_transactions', ['org_id'], unique=False)
    op.create_index(op.f('ix_bank_transactions_match_status'), 'bank_transactions', ['match_status'], unique=False)

    # Create payment_matches table
    op.create_table(
        'payment_matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('bank_transaction_id', sa.Integer(), nullable=False),
        sa.Column('purchase_invoice_id', sa.Integer(), nullable=True),
        sa.Column('sales_invoice_id', sa.Integer(), nullable=True),
        sa.Column('matched_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('match_score', sa.Float(), nullable=False),
        sa.Column('match_type', sa.String(24), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['bank_transaction_id'], ['bank_transactions.id'], ),
        sa.ForeignKeyConstraint(['purchase_invoice_id'], ['purchase_invoices.id'], ),
        sa.ForeignKeyConstraint(['sales_invoice_id'], ['sales_invoices.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payment_matches_id'), 'payment_matches', ['id'], unique=False)
    op.create_index(op.f('ix_payment_matches_org_id'), 'payment_matches', ['org_id'], unique=False)
    op.create_index(op.f('ix_payment_matches_bank_transaction_id'), 'payment_matches', ['bank_transaction_id'], unique=False)
    op.create_index(op.f('ix_payment_matches_purchase_invoice_id'), 'payment_matches', ['purchase_invoice_id'], unique=False)
    op.create_index(op.f('ix_payment_matches_sales_invoice_id'), 'payment_matches', ['sales_invoice_id'], unique=False)

    # Create gst_returns and gst_return_entries tables
    op.create_table(
        'gst_returns',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('return_type', sa.String(16), nullable=False),
        sa.Column('period', sa.String(6), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_gst_returns_id'), 'gst_returns', ['id'], unique=False)
    op.create_index(op.f('ix_gst_returns_org_id'), 'gst_returns', ['org_id'], unique=False)

    op.create_table(
        'gst_return_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('return_id', sa.Integer(), nullable=False),
        sa.Column('counterparty_gstin', sa.String(15), nullable=False),
        sa.Column('counterparty_name', sa.String(), nullable=True),
        sa.Column('invoice_number', sa.String(), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=True),
        sa.Column('invoice_value', sa.Numeric(14, 2), nullable=False),
        sa.Column('taxable_value', sa.Numeric(14, 2), nullable=False),
        sa.Column('cgst', sa.Numeric(14, 2), nullable=False),
        sa.Column('sgst', sa.Numeric(14, 2), nullable=False),
        sa.Column('igst', sa.Numeric(14, 2), nullable=False),
        sa.Column('itc_available', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['return_id'], ['gst_returns.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_gst_return_entries_id'), 'gst_return_entries', ['id'], unique=False)
    op.create_index(op.f('ix_gst_return_entries_return_id'), 'gst_return_entries', ['return_id'], unique=False)
    op.create_index(op.f('ix_gst_return_entries_counterparty_gstin'), 'gst_return_entries', ['counterparty_gstin'], unique=False)

    # Create gst_matches table
    op.create_table(
        'gst_matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('idempotency_key', sa.String(64), nullable=False),
        sa.Column('gst_entry_id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('match_type', sa.String(20), nullable=False),
        sa.Column('match_score', sa.Float(), nullable=False),
        sa.Column('itc_status', sa.String(20), nullable=False),
        sa.Column('discrepancies', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['gst_entry_id'], ['gst_return_entries.id'], ),
        sa.ForeignKeyConstraint(['invoice_id'], ['purchase_invoices.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_gst_matches_id'), 'gst_matches', ['id'], unique=False)
    op.create_index(op.f('ix_gst_matches_org_id'), 'gst_matches', ['org_id'], unique=False)
    op.create_index(op.f('ix_gst_matches_idempotency_key'), 'gst_matches', ['idempotency_key'], unique=True)
    op.create_index(op.f('ix_gst_matches_gst_entry_id'), 'gst_matches', ['gst_entry_id'], unique=False)
    op.create_index(op.f('ix_gst_matches_invoice_id'), 'gst_matches', ['invoice_id'], unique=False)

    # Create discount_terms table
    op.create_table(
        'discount_terms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('term_type', sa.String(32), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('valid_from', sa.Date(), nullable=False),
        sa.Column('valid_to', sa.Date(), nullable=True),
        sa.Column('min_order_value', sa.Numeric(14, 2), nullable=True),
        sa.Column('applicable_skus', sa.JSON(), nullable=False),
        sa.Column('flat_percent', sa.Numeric(6, 3), nullable=True),
        sa.Column('flat_amount', sa.Numeric(14, 2), nullable=True),
        sa.Column('slabs', sa.JSON(), nullable=True),
        sa.Column('payment_within_days', sa.Integer(), nullable=True),
        sa.Column('penalty_percent', sa.Numeric(6, 3), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_discount_terms_id'), 'discount_terms', ['id'], unique=False)
    op.create_index(op.f('ix_discount_terms_org_id'), 'discount_terms', ['org_id'], unique=False)
    op.create_index(op.f('ix_discount_terms_vendor_id'), 'discount_terms', ['vendor_id'], unique=False)

    # Create discount_audits table
    op.create_table(
        'discount_audits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('idempotency_key', sa.String(64), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('discount_term_id', sa.Integer(), nullable=True),
        sa.Column('expected_discount', sa.Numeric(14, 2), nullable=False),
        sa.Column('actual_discount', sa.Numeric(14, 2), nullable=False),
        sa.Column('difference', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(24), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['invoice_id'], ['purchase_invoices.id'], ),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
        sa.ForeignKeyConstraint(['discount_term_id'], ['discount_terms.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_discount_audits_id'), 'discount_audits', ['id'], unique=False)
    op.create_index(op.f('ix_discount_audits_org_id'), 'discount_audits', ['org_id'], unique=False)
    op.create_index(op.f('ix_discount_audits_idempotency_key'), 'discount_audits', ['idempotency_key'], unique=True)
    op.create_index(op.f('ix_discount_audits_invoice_id'), 'discount_audits', ['invoice_id'], unique=False)
    op.create_index(op.f('ix_discount_audits_vendor_id'), 'discount_audits', ['vendor_id'], unique=False)
    op.create_index(op.f('ix_discount_audits_status'), 'discount_audits', ['status'], unique=False)

    # Create document_matches table
    op.create_table(
        'document_matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.String(64), nullable=False),
        sa.Column('idempotency_key', sa.String(64), nullable=False),
        sa.Column('purchase_order_id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('match_score', sa.Float(), nullable=False),
        sa.Column('match_type', sa.String(20), nullable=False),
        sa.Column('total_value_match', sa.Boolean(), nullable=False),
        sa.Column('total_gst_match', sa.Boolean(), nullable=False),
        sa.Column('discrepancies', sa.JSON(), nullable=False),
        sa.Column('needs_review', sa.Boolean(), nullable=False),
        sa.Column('auto_approve', sa.Boolean(), nullable=False),
        sa.Column('resolution', sa.String(20), nullable=True),
        sa.Column('resolved_by', sa.String(100), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['purchase_order_id'], ['purchase_orders.id'], ),
        sa.ForeignKeyConstraint(['invoice_id'], ['purchase_invoices.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_document_matches_id'), 'document_matches', ['id'], unique=False)
    op.create_index(op.f('ix_document_matches_org_id'), 'document_matches', ['org_id'], unique=False)
    op.create_index(op.f('ix_document_matches_idempotency_key'), 'document_matches', ['idempotency_key'], unique=True)
    op.create_index(op.f('ix_document_matches_purchase_order_id'), 'document_matches', ['purchase_order_id'], unique=False)
    op.create_index(op.f('ix_document_matches_invoice_id'), 'document_matches', ['invoice_id'], unique=False)
    op.create_index(op.f('ix_document_matches_match_type'), 'document_matches', ['match_type'], unique=False)
    op.create_index(op.f('ix_document_matches_needs_review'), 'document_matches', ['needs_review'], unique=False)

    # Create line_matches table
    op.create_table(
        'line_matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('document_match_id', sa.Integer(), nullable=False),
        sa.Column('po_line_id', sa.Integer(), nullable=False),
        sa.Column('invoice_line_id', sa.Integer(), nullable=False),
        sa.Column('quantity_variance', sa.Numeric(14, 3), nullable=False),
        sa.Column('quantity_variance_percent', sa.Float(), nullable=False),
        sa.Column('price_variance', sa.Numeric(14, 2), nullable=False),
        sa.Column('price_variance_percent', sa.Float(), nullable=False),
        sa.Column('amount_variance', sa.Numeric(14, 2), nullable=False),
        sa.Column('within_quantity_tolerance', sa.Boolean(), nullable=False),
        sa.Column('within_price_tolerance', sa.Boolean(), nullable=False),
        sa.Column('match_score', sa.Float(), nullable=False),
        sa.Column('match_type', sa.String(20), nullable=False),
        sa.ForeignKeyConstraint(['document_match_id'], ['document_matches.id'], ),
        sa.ForeignKeyConstraint(['po_line_id'], ['po_lines.id'], ),
        sa.ForeignKeyConstraint(['invoice_line_id'], ['invoice_lines.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_line_matches_id'), 'line_matches', ['id'], unique=False)
    op.create_index(op.f('ix_line_matches_document_match_id'), 'line_matches', ['document_match_id'], unique=False)

    # Create review_queue table
    op.create_table(
        'review_queue',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('document_match_id', sa.Integer(), nullable=False),
        sa.Column('priority', sa.String(10), nullable=False),
        sa.Column('issue_category', sa.String(50), nullable=False),
        sa.Column('assigned_to', sa.String(100), nullable=True),
        sa.Column('sla_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['document_match_id'], ['document_matches.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_review_queue_id'), 'review_queue', ['id'], unique=False)
    op.create_index(op.f('ix_review_queue_document_match_id'), 'review_queue', ['document_match_id'], unique=False)
    op.create_index(op.f('ix_review_queue_priority'), 'review_queue', ['priority'], unique=False)
    op.create_index(op.f('ix_review_queue_resolved_at'), 'review_queue', ['resolved_at'], unique=False)


def downgrade() -> None:
    op.drop_table('review_queue')
    op.drop_table('line_matches')
    op.drop_table('document_matches')
    op.drop_table('discount_audits')
    op.drop_table('discount_terms')
    op.drop_table('gst_matches')
    op.drop_table('gst_return_entries')
    op.drop_table('gst_returns')
    op.drop_table('payment_matches')
    op.drop_table('bank_transactions')
    op.drop_table('sales_invoices')
    op.drop_table('invoice_lines')
    op.drop_table('purchase_invoices')
    op.drop_table('po_lines')
    op.drop_table('purchase_orders')
    op.drop_table('skus')
    op.drop_table('customers')
    op.drop_table('vendors')
