"""add department row version

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
import uuid

from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("departments", sa.Column("row_version", sa.LargeBinary(length=16), nullable=True))

    bind = op.get_bind()
    department_ids = list(bind.execute(sa.text("SELECT id FROM departments")).scalars())
    statement = sa.text("UPDATE departments SET row_version = :token WHERE id = :id").bindparams(
        sa.bindparam("token", type_=sa.LargeBinary())
    )
    for department_id in department_ids:
        bind.execute(statement, {"token": uuid.uuid4().bytes, "id": department_id})

    with op.batch_alter_table("departments") as batch_op:
        batch_op.alter_column("row_version", existing_type=sa.LargeBinary(length=16), nullable=False)


def downgrade() -> None:
    with op.batch_alter_table("departments") as batch_op:
        batch_op.drop_column("row_version")
