"""initial_schema

Revision ID: c3f1a9d2e4b7
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c3f1a9d2e4b7'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False,
                  comment='Display name shown next to books and reviews'),
        sa.Column('email', sa.String(length=255), nullable=False,
                  comment="User's email address (used for login)"),
        sa.Column('hashed_password', sa.String(length=255), nullable=False,
                  comment='Bcrypt hashed password'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  comment='When the user registered'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'books',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False, comment='Book title'),
        sa.Column('author', sa.String(length=100), nullable=False,
                  comment='Author name as entered by the user'),
        sa.Column('description', sa.Text(), nullable=False,
                  comment='Book description or summary'),
        sa.Column('genre', sa.String(length=20), nullable=False,
                  comment='One of the fixed genre values'),
        sa.Column('published_year', sa.Integer(), nullable=False,
                  comment='Year of publication'),
        sa.Column('cover_image', sa.String(length=500), nullable=True,
                  comment='Cover image URL'),
        sa.Column('added_by_id', sa.Integer(), nullable=False,
                  comment='User who added the book (owner)'),
        sa.Column('average_rating', sa.Numeric(precision=2, scale=1), nullable=False,
                  server_default='0',
                  comment='Mean review rating rounded to one decimal, 0 if no reviews'),
        sa.Column('review_count', sa.Integer(), nullable=False, server_default='0',
                  comment='Number of reviews for this book'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['added_by_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('title', 'author', 'genre', 'published_year', 'added_by_id',
                   'average_rating', 'review_count', 'created_at'):
        op.create_index(op.f(f'ix_books_{column}'), 'books', [column], unique=False)

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('book_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False, comment='Rating from 1-5 stars'),
        sa.Column('review_text', sa.Text(), nullable=False, comment='Review text content'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('book_id', 'user_id', name='uq_review_book_user'),
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_book_id'), 'reviews', ['book_id'], unique=False)
    op.create_index(op.f('ix_reviews_user_id'), 'reviews', ['user_id'], unique=False)
    op.create_index(op.f('ix_reviews_created_at'), 'reviews', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_reviews_created_at'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_user_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_book_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_id'), table_name='reviews')
    op.drop_table('reviews')

    for column in ('created_at', 'review_count', 'average_rating', 'added_by_id',
                   'published_year', 'genre', 'author', 'title'):
        op.drop_index(op.f(f'ix_books_{column}'), table_name='books')
    op.drop_table('books')

    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
