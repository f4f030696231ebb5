"""initial schema

Revision ID: 0001
Revises:
Create Date: 2025-10-01 12:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

loan_status = sa.Enum('ACTIVE', 'RETURNED', name='loanstatus')
role = sa.Enum('USER', 'ADMIN', name='role')


def upgrade() -> None:
    op.create_table(
        'authors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('biography', sa.Text()),
        sa.Column('nationality', sa.String(100)),
    )
    op.create_table(
        'books',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('author', sa.String(100)),
        sa.Column('content', sa.Text()),
        sa.Column('publication_year', sa.Integer()),
        sa.Column('isbn', sa.String(17), nullable=False),
        sa.Column('available', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        'book_authors',
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('authors.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('surname', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('address', sa.String(255)),
        sa.Column('city', sa.String(100)),
        sa.Column('password', sa.String(100), nullable=False),
        sa.Column('role', role, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'loans',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('loan_date', sa.Date(), nullable=False),
        sa.Column('return_date', sa.Date()),
        sa.Column('status', loan_status, nullable=False),
    )
    op.create_index('ix_loans_user_id', 'loans', ['user_id'])
    op.create_index('ix_loans_book_id', 'loans', ['book_id'])


def downgrade() -> None:
    op.drop_index('ix_loans_book_id', table_name='loans')
    op.drop_index('ix_loans_user_id', table_name='loans')
    op.drop_table('loans')
    op.drop_table('users')
    op.drop_table('book_authors')
    op.drop_table('books')
    op.drop_table('authors')
    loan_status.drop(op.get_bind(), checkfirst=True)
    role.drop(op.get_bind(), checkfirst=True)
