"""audit_log_immutability

Revision ID: 8c2e4f6a1d03
Revises: 5a1d0c3e9b27
Create Date: 2026-10-19 09:05:00.000000

Audit rows outlive the imports they describe, including rolled-back ones:
- Revoke UPDATE and DELETE from PUBLIC
- Grant SELECT and INSERT only
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '8c2e4f6a1d03'
down_revision: Union[str, None] = '5a1d0c3e9b27'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("REVOKE UPDATE, DELETE ON audit_logs FROM PUBLIC;")
    op.execute("GRANT SELECT, INSERT ON audit_logs TO PUBLIC;")


def downgrade() -> None:
    op.execute("GRANT UPDATE, DELETE ON audit_logs TO PUBLIC;")
