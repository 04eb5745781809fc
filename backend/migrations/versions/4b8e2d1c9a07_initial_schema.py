"""initial schema: users, blood centers, donations

Revision ID: 4b8e2d1c9a07
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '4b8e2d1c9a07'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('roles', sa.String(length=64), nullable=False),
        sa.Column('status', sa.Enum('active', 'banned', name='account_status', native_enum=False), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('gender', sa.Enum('male', 'female', 'other', name='gender', native_enum=False), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column(
            'blood_type',
            sa.Enum('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-', name='blood_type', native_enum=False),
            nullable=True,
        ),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('medical_history', sa.Text(), nullable=True),
        sa.Column('donation_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_donation_date', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('donation_count >= 0', name=op.f('ck_users_donation_count_non_negative')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_status', 'users', ['status'], unique=False)

    op.create_table(
        'blood_centers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('operating_hours', sa.JSON(), nullable=True),
        sa.Column('current_donor_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('archived', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('current_donor_count >= 0', name=op.f('ck_blood_centers_donor_count_non_negative')),
        sa.CheckConstraint('latitude >= -90 AND latitude <= 90', name=op.f('ck_blood_centers_latitude_range')),
        sa.CheckConstraint('longitude >= -180 AND longitude <= 180', name=op.f('ck_blood_centers_longitude_range')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_blood_centers')),
    )
    op.create_index('ix_blood_centers_archived', 'blood_centers', ['archived'], unique=False)

    op.create_table(
        'donations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('center_id', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('requested', 'confirmed', 'completed', 'canceled', name='donation_status', native_enum=False),
            nullable=False,
        ),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('scheduled_for', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['center_id'], ['blood_centers.id'], name=op.f('fk_donations_center_id_blood_centers')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name=op.f('fk_donations_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_donations')),
    )
    op.create_index('ix_donations_user_id', 'donations', ['user_id'], unique=False)
    op.create_index('ix_donations_center_id', 'donations', ['center_id'], unique=False)
    op.create_index('ix_donations_status', 'donations', ['status'], unique=False)


def downgrade():
    op.drop_index('ix_donations_status', table_name='donations')
    op.drop_index('ix_donations_center_id', table_name='donations')
    op.drop_index('ix_donations_user_id', table_name='donations')
    op.drop_table('donations')
    op.drop_index('ix_blood_centers_archived', table_name='blood_centers')
    op.drop_table('blood_centers')
    op.drop_index('ix_users_status', table_name='users')
    op.drop_table('users')
