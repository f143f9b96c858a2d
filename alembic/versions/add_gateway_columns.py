"""Add gateway reference columns to payments and enrollment uniqueness.

Revision ID: add_gateway_columns
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'add_gateway_columns'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Gateway session reference (bKash paymentID / SSLCommerz sessionkey)
    op.add_column('payments', sa.Column('gateway_session_id', sa.String(255), nullable=True))
    # Gateway final transaction id (bKash trxID / SSLCommerz bank_tran_id)
    op.add_column('payments', sa.Column('gateway_transaction_id', sa.String(255), nullable=True))

    op.create_index('ix_payments_gateway_session_id', 'payments', ['gateway_session_id'])
    op.create_index(
        'ux_payments_transaction_id',
        'payments',
        ['transaction_id'],
        unique=True,
        postgresql_where=sa.text("transaction_id IS NOT NULL"),
    )

    # Collapse duplicate enrollments before enforcing uniqueness; keep the oldest
    op.execute(
        """
        DELETE FROM enrollments e
        USING enrollments older
        WHERE e.student_id = older.student_id
          AND e.course_id = older.course_id
          AND (e.enrolled_at, e.id) > (older.enrolled_at, older.id)
        """
    )
    op.create_unique_constraint(
        'uq_enrollments_student_course',
        'enrollments',
        ['student_id', 'course_id'],
    )


def downgrade() -> None:
    op.drop_constraint('uq_enrollments_student_course', 'enrollments', type_='unique')
    op.drop_index('ux_payments_transaction_id', table_name='payments')
    op.drop_index('ix_payments_gateway_session_id', table_name='payments')
    op.drop_column('payments', 'gateway_transaction_id')
    op.drop_column('payments', 'gateway_session_id')
