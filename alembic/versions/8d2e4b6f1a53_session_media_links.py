"""session media links and thumbnails

Revision ID: 8d2e4b6f1a53
Revises: 3c1f9a7e2b10
Create Date: 2026-10-20 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d2e4b6f1a53"
down_revision: str | Sequence[str] | None = "3c1f9a7e2b10"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_SESSION_COLUMNS = ("captions_vtt_url", "guide_online_url", "guide_pdf_url", "thumbnail")


def upgrade() -> None:
    op.add_column("courses", sa.Column("thumbnail", sa.Text(), nullable=True))
    for name in _SESSION_COLUMNS:
        op.add_column("course_sessions", sa.Column(name, sa.Text(), nullable=True))


def downgrade() -> None:
    for name in reversed(_SESSION_COLUMNS):
        op.drop_column("course_sessions", name)
    op.drop_column("courses", "thumbnail")
