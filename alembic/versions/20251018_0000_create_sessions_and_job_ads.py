"""create_anonymous_sessions_and_job_ads

Revision ID: 20251018_0000
Revises:
Create Date: 2025-10-18 00:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa
from jobboard.database_types import GUID


revision = '20251018_0000'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'anonymous_sessions',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('created_ip', sa.String(length=45), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_seen_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'job_ads',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('collection_path', sa.String(), nullable=False),
        sa.Column('variant', sa.String(length=20), nullable=False),
        sa.Column('user_id', GUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('hide_my_name', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('contact_number', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('experience', sa.String(length=10), nullable=True),
        sa.Column('region', sa.String(length=255), nullable=True),
        sa.Column('skills', sa.Text(), nullable=True),
        sa.Column('work_mode', sa.String(length=10), nullable=True),
        sa.Column('job_title', sa.String(length=255), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('worker_mode', sa.String(length=10), nullable=True),
        sa.Column('age_range', sa.String(length=10), nullable=True),
        sa.Column('required_skills', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_job_ads_collection_path'), 'job_ads', ['collection_path'], unique=False)
    op.create_index(op.f('ix_job_ads_variant'), 'job_ads', ['variant'], unique=False)
    op.create_index(op.f('ix_job_ads_user_id'), 'job_ads', ['user_id'], unique=False)
    op.create_index(op.f('ix_job_ads_created_at'), 'job_ads', ['created_at'], unique=False)
    op.create_index(op.f('ix_job_ads_approved'), 'job_ads', ['approved'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_job_ads_approved'), table_name='job_ads')
    op.drop_index(op.f('ix_job_ads_created_at'), table_name='job_ads')
    op.drop_index(op.f('ix_job_ads_user_id'), table_name='job_ads')
    op.drop_index(op.f('ix_job_ads_variant'), table_name='job_ads')
    op.drop_index(op.f('ix_job_ads_collection_path'), table_name='job_ads')
    op.drop_table('job_ads')
    op.drop_table('anonymous_sessions')
