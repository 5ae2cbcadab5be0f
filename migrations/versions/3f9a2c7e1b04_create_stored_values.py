from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9a2c7e1b04"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "stored_values",
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade():
    op.drop_table("stored_values")
