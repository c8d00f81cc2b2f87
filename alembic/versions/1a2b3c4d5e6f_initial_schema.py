"""initial_schema

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-18

Adds:
- users table
- reports table (file metadata, one owner per report)
- vitals table (readings, optionally linked to a report)
- shared_access table (per-email read/write grants on reports)
"""
from alembic import op
import sqlalchemy as sa

revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'reports',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(100), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('file_path', sa.String(255), nullable=False),
        sa.Column('original_filename', sa.String(255), nullable=True),
        sa.Column('content_type', sa.String(100), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_reports_user_id', 'reports', ['user_id'])
    op.create_index('idx_reports_user_date', 'reports', ['user_id', 'date'])

    op.create_table(
        'vitals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(20), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('report_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['report_id'], ['reports.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_vitals_user_recorded_at', 'vitals', ['user_id', 'recorded_at'])
    op.create_index('idx_vitals_user_type', 'vitals', ['user_id', 'type'])

    op.create_table(
        'shared_access',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('report_id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('shared_with_email', sa.String(255), nullable=False),
        sa.Column('access_type', sa.Enum('READ', 'WRITE', name='accesstype'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.ForeignKeyConstraint(['report_id'], ['reports.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('report_id', 'shared_with_email', name='uq_shared_access_report_email'),
    )
    op.create_index('idx_shared_access_email', 'shared_access', ['shared_with_email'])
    op.create_index('idx_shared_access_owner_id', 'shared_access', ['owner_id'])


def downgrade() -> None:
    op.drop_index('idx_shared_access_owner_id', table_name='shared_access')
    op.drop_index('idx_shared_access_email', table_name='shared_access')
    op.drop_table('shared_access')
    op.drop_index('idx_vitals_user_type', table_name='vitals')
    op.drop_index('idx_vitals_user_recorded_at', table_name='vitals')
    op.drop_table('vitals')
    op.drop_index('idx_reports_user_date', table_name='reports')
    op.drop_index('idx_reports_user_id', table_name='reports')
    op.drop_table('reports')
    op.drop_table('users')
    sa.Enum(name='accesstype').drop(op.get_bind(), checkfirst=True)
