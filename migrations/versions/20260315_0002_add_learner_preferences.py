"""Store the region and mode of the last standard session per learner."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20260315_0002"
down_revision: Union[str, None] = "20260301_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "learner_preferences",
        sa.Column("learner_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("last_region", sa.String(length=64), server_default="World", nullable=False),
        sa.Column("last_mode", sa.String(length=16), server_default="forward", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("learner_preferences")
