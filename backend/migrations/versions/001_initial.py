"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-15

Creates all database tables for the Student Registry:
- users: Accounts that can sign in
- auth_sessions: Server-side sessions behind the browser cookie
- alunos: Student records, unique on matricula and email

Also creates indexes for the session lookup and the list ordering.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Users Table ───────────────────────────────────────────
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(),
                  server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # ── Auth Sessions Table ───────────────────────────────────
    op.create_table(
        'auth_sessions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('users.id'), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(),
                  server_default=sa.func.now(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_auth_sessions_user_id', 'auth_sessions', ['user_id'])
    op.create_index('ix_auth_sessions_token_hash', 'auth_sessions', ['token_hash'], unique=True)

    # ── Alunos Table ──────────────────────────────────────────
    op.create_table(
        'alunos',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('nome_completo', sa.String(100), nullable=False),
        sa.Column('matricula', sa.String(20), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('curso', sa.String(100), nullable=False),
        sa.Column('data_criacao', sa.DateTime(),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('users.id'), nullable=True),
        sa.UniqueConstraint('matricula', name='alunos_matricula_key'),
        sa.UniqueConstraint('email', name='alunos_email_key'),
    )

    # Default list ordering is newest first
    op.create_index('ix_alunos_data_criacao', 'alunos', ['data_criacao'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index('ix_alunos_data_criacao', table_name='alunos')
    op.drop_table('alunos')
    op.drop_index('ix_auth_sessions_token_hash', table_name='auth_sessions')
    op.drop_index('ix_auth_sessions_user_id', table_name='auth_sessions')
    op.drop_table('auth_sessions')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
