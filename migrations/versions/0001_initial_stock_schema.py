"""0001 initial stock schema

Revision ID: 0001_initial_stock_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_stock_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('password_hash', sa.String(length=255), server_default='', nullable=True),
        sa.Column('first_name', sa.String(length=64), nullable=True),
        sa.Column('last_name', sa.String(length=64), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )

    op.create_table(
        'service',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'drug_lot',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('barcode', sa.String(length=64), nullable=False),
        sa.Column('lot_number', sa.String(length=64), nullable=True),
        sa.Column('designation', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=128), nullable=True),
        sa.Column('initial_stock', sa.Integer(), nullable=True),
        sa.Column('current_stock', sa.Integer(), nullable=False),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.CheckConstraint('current_stock >= 0', name='check_current_stock_non_negative'),
        sa.CheckConstraint('low_stock_threshold >= 0', name='check_low_stock_threshold_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('barcode', 'lot_number', name='uq_drug_lot_barcode_lot_number'),
    )
    with op.batch_alter_table('drug_lot', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_drug_lot_barcode'), ['barcode'], unique=False)
        batch_op.create_index(batch_op.f('ix_drug_lot_designation'), ['designation'], unique=False)
        batch_op.create_index(batch_op.f('ix_drug_lot_category'), ['category'], unique=False)
        batch_op.create_index(batch_op.f('ix_drug_lot_expiry_date'), ['expiry_date'], unique=False)
        batch_op.create_index('ix_drug_lot_updated_at', ['updated_at'], unique=False)
        batch_op.create_index(
            'uq_drug_lot_barcode_without_lot_number',
            ['barcode'],
            unique=True,
            sqlite_where=sa.text('lot_number IS NULL'),
            postgresql_where=sa.text('lot_number IS NULL'),
        )

    op.create_table(
        'distribution',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('drug_lot_id', sa.Integer(), nullable=True),
        sa.Column('barcode', sa.String(length=64), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('lot_number', sa.String(length=64), nullable=True),
        sa.Column('quantity_distributed', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=True),
        sa.Column('service_name', sa.String(length=128), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.CheckConstraint('quantity_distributed > 0', name='check_quantity_distributed_positive'),
        sa.ForeignKeyConstraint(['drug_lot_id'], ['drug_lot.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('distribution', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_distribution_drug_lot_id'), ['drug_lot_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_distribution_barcode'), ['barcode'], unique=False)
        batch_op.create_index(batch_op.f('ix_distribution_service_id'), ['service_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_distribution_date'), ['date'], unique=False)

    op.create_table(
        'alert_read_marker',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('alert_key', sa.String(length=128), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'alert_key', name='uq_alert_read_marker_user_key'),
    )
    with op.batch_alter_table('alert_read_marker', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_alert_read_marker_user_id'), ['user_id'], unique=False)


def downgrade():
    with op.batch_alter_table('alert_read_marker', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_alert_read_marker_user_id'))
    op.drop_table('alert_read_marker')

    with op.batch_alter_table('distribution', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_distribution_date'))
        batch_op.drop_index(batch_op.f('ix_distribution_service_id'))
        batch_op.drop_index(batch_op.f('ix_distribution_barcode'))
        batch_op.drop_index(batch_op.f('ix_distribution_drug_lot_id'))
    op.drop_table('distribution')

    with op.batch_alter_table('drug_lot', schema=None) as batch_op:
        batch_op.drop_index('uq_drug_lot_barcode_without_lot_number')
        batch_op.drop_index('ix_drug_lot_updated_at')
        batch_op.drop_index(batch_op.f('ix_drug_lot_expiry_date'))
        batch_op.drop_index(batch_op.f('ix_drug_lot_category'))
        batch_op.drop_index(batch_op.f('ix_drug_lot_designation'))
        batch_op.drop_index(batch_op.f('ix_drug_lot_barcode'))
    op.drop_table('drug_lot')

    op.drop_table('service')
    op.drop_table('user')
