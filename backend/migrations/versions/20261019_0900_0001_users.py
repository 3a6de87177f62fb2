"""Users table mirrored from Clerk.

Revision ID: 0001_users
Revises:
Create Date: 2026-10-19

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic
revision = "0001_users"
down_revision: str | None = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Primary key is the Clerk user id (user_...), not a generated value
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("profile_image", sa.Text, nullable=True),
    )


def downgrade() -> None:
    op.drop_table("users")
