"""initial freight ledger schema

Revision ID: 3a1f0c9e7b21
Revises:
Create Date: 2025-11-02 10:14:37.518204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3a1f0c9e7b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


payment_status = ('UNPAID', 'PARTIALLY_PAID', 'PAID')


def upgrade() -> None:
    """Create customers, lorry receipts, invoices, truck hiring notes, payments and counters."""
    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(length=10), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
    )
    op.create_index(op.f('ix_audit_log_id'), 'audit_log', ['id'])
    op.create_index('ix_audit_log_record', 'audit_log', ['table_name', 'record_id'])

    op.create_table(
        'numbering_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('current_number', sa.Integer(), nullable=False),
        *_audit_columns(),
    )
    op.create_index(op.f('ix_numbering_config_id'), 'numbering_config', ['id'])
    op.create_index(op.f('ix_numbering_config_type'), 'numbering_config', ['type'], unique=True)

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('trade_name', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('state', sa.String(), nullable=False),
        sa.Column('gstin', sa.String(), nullable=True),
        sa.Column('contact_person', sa.String(), nullable=True),
        sa.Column('contact_phone', sa.String(), nullable=True),
        sa.Column('contact_email', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('pin', sa.String(), nullable=True),
        *_audit_columns(),
    )
    op.create_index(op.f('ix_customers_id'), 'customers', ['id'])
    op.create_index(op.f('ix_customers_name'), 'customers', ['name'], unique=True)

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('invoice_number', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('gst_type', sa.Enum('CGST_SGST', 'IGST', name='gsttype'), nullable=False),
        sa.Column('cgst_rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('sgst_rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('igst_rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('cgst_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('sgst_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('igst_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('grand_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_rcm', sa.Boolean(), nullable=False),
        sa.Column('is_manual_gst', sa.Boolean(), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('paid_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('balance_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('status', sa.Enum(*payment_status, name='invoicestatus'), nullable=False),
        *_audit_columns(),
    )
    op.create_index(op.f('ix_invoices_id'), 'invoices', ['id'])
    op.create_index(op.f('ix_invoices_invoice_number'), 'invoices', ['invoice_number'], unique=True)

    op.create_table(
        'lorry_receipts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lr_number', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('consignor_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('consignee_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('vehicle_number', sa.String(), nullable=False),
        sa.Column('from_location', sa.String(), nullable=False),
        sa.Column('to_location', sa.String(), nullable=False),
        sa.Column('loading_address', sa.Text(), nullable=True),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('packages', sa.JSON(), nullable=False),
        sa.Column('freight', sa.Numeric(12, 2), nullable=False),
        sa.Column('aoc', sa.Numeric(12, 2), nullable=False),
        sa.Column('hamali', sa.Numeric(12, 2), nullable=False),
        sa.Column('b_ch', sa.Numeric(12, 2), nullable=False),
        sa.Column('tr_ch', sa.Numeric(12, 2), nullable=False),
        sa.Column('detention_ch', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('e_way_bill_no', sa.String(), nullable=True),
        sa.Column('value_goods', sa.Numeric(14, 2), nullable=True),
        sa.Column('gst_payable_by', sa.Enum('CONSIGNOR', 'CONSIGNEE', 'TRANSPORTER', name='gstpayableby'), nullable=False),
        sa.Column('risk_bearer', sa.Enum('CARRIER', 'OWNER', name='riskbearer'), nullable=False),
        sa.Column('has_insurance', sa.Boolean(), nullable=False),
        sa.Column('invoice_no', sa.String(), nullable=True),
        sa.Column('seal_no', sa.String(), nullable=True),
        sa.Column('status', sa.Enum('CREATED', 'IN_TRANSIT', 'DELIVERED', 'INVOICED', 'PAID', 'UNBILLED',
                                    name='lorryreceiptstatus'), nullable=False),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=True),
        *_audit_columns(),
    )
    op.create_index(op.f('ix_lorry_receipts_id'), 'lorry_receipts', ['id'])
    op.create_index(op.f('ix_lorry_receipts_lr_number'), 'lorry_receipts', ['lr_number'], unique=True)

    op.create_table(
        'truck_hiring_notes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('thn_number', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('truck_number', sa.String(), nullable=False),
        sa.Column('truck_type', sa.String(), nullable=False),
        sa.Column('vehicle_capacity', sa.Numeric(10, 2), nullable=False),
        sa.Column('loading_location', sa.String(), nullable=False),
        sa.Column('unloading_location', sa.String(), nullable=False),
        sa.Column('loading_date_time', sa.DateTime(), nullable=False),
        sa.Column('expected_delivery_date', sa.Date(), nullable=False),
        sa.Column('goods_type', sa.String(), nullable=False),
        sa.Column('agency_name', sa.String(), nullable=False),
        sa.Column('truck_owner_name', sa.String(), nullable=False),
        sa.Column('truck_owner_contact', sa.String(), nullable=True),
        sa.Column('freight_rate', sa.Numeric(12, 2), nullable=False),
        sa.Column('freight_rate_type', sa.String(), nullable=False),
        sa.Column('advance_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('additional_charges', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_mode', sa.String(), nullable=False),
        sa.Column('payment_terms', sa.String(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('linked_lr', sa.String(), nullable=True),
        sa.Column('linked_invoice', sa.String(), nullable=True),
        sa.Column('paid_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('balance_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('status', sa.Enum(*payment_status, name='thnstatus'), nullable=False),
        *_audit_columns(),
    )
    op.create_index(op.f('ix_truck_hiring_notes_id'), 'truck_hiring_notes', ['id'])
    op.create_index(op.f('ix_truck_hiring_notes_thn_number'), 'truck_hiring_notes', ['thn_number'], unique=True)

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('payment_number', sa.Integer(), nullable=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=True),
        sa.Column('truck_hiring_note_id', sa.Integer(), sa.ForeignKey('truck_hiring_notes.id'), nullable=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('type', sa.Enum('ADVANCE', 'RECEIPT', 'PAYMENT', name='paymenttype'), nullable=False),
        sa.Column('mode', sa.Enum('CASH', 'CHEQUE', 'NEFT', 'RTGS', 'UPI', name='paymentmode'), nullable=False),
        sa.Column('reference_no', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tds_applicable', sa.Boolean(), nullable=False),
        sa.Column('tds_rate', sa.Numeric(5, 2), nullable=True),
        sa.Column('tds_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('tds_date', sa.Date(), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint(
            'NOT (invoice_id IS NOT NULL AND truck_hiring_note_id IS NOT NULL)',
            name='ck_payment_single_parent',
        ),
    )
    op.create_index(op.f('ix_payments_id'), 'payments', ['id'])
    op.create_index(op.f('ix_payments_payment_number'), 'payments', ['payment_number'], unique=True)
    op.create_index(op.f('ix_payments_invoice_id'), 'payments', ['invoice_id'])
    op.create_index(op.f('ix_payments_truck_hiring_note_id'), 'payments', ['truck_hiring_note_id'])


def downgrade() -> None:
    """Drop every table created above, children first."""
    op.drop_table('payments')
    op.drop_table('truck_hiring_notes')
    op.drop_table('lorry_receipts')
    op.drop_table('invoices')
    op.drop_table('customers')
    op.drop_table('numbering_config')
    op.drop_table('audit_log')
    bind = op.get_bind()
    for enum_name in ('paymentmode', 'paymenttype', 'thnstatus', 'lorryreceiptstatus', 'riskbearer',
                      'gstpayableby', 'invoicestatus', 'gsttype'):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
