"""Auth tables backing the MFA, password history, service client scope
and token exchange repositories, with tenant RLS policies.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d9e7a5b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLES = (
    "auth_mfa_setups",
    "auth_password_histories",
    "auth_service_client_scopes",
    "auth_token_exchanges",
)


def _audit_columns() -> list:
    return [
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "tenant_code",
            sa.UUID(),
            nullable=False,
            server_default=sa.text("NULLIF(current_setting('app.tenant_id', true), '')::uuid"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("created_by", sa.Text(), nullable=False),
        sa.Column("created_correlation_id", sa.UUID(), nullable=False),
        sa.Column("created_execution_origin", sa.Text(), nullable=False),
        sa.Column("created_business_operation_code", sa.Text(), nullable=False),
        sa.Column("last_changed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_changed_by", sa.Text(), nullable=True),
        sa.Column("last_changed_correlation_id", sa.UUID(), nullable=True),
        sa.Column("last_changed_execution_origin", sa.Text(), nullable=True),
        sa.Column("last_changed_business_operation_code", sa.Text(), nullable=True),
        sa.Column("entity_version", sa.Integer(), server_default=sa.text("1"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "auth_mfa_setups",
        *_audit_columns(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("encrypted_shared_secret", sa.String(1024), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("enabled_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("tenant_code", "user_id", name="uq_auth_mfa_setups_tenant_user"),
    )

    op.create_table(
        "auth_password_histories",
        *_audit_columns(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("password_hash", sa.String(1024), nullable=False),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_auth_password_histories_tenant_user_changed",
        "auth_password_histories",
        ["tenant_code", "user_id", "changed_at"],
    )

    op.create_table(
        "auth_service_client_scopes",
        *_audit_columns(),
        sa.Column("service_client_id", sa.UUID(), nullable=False),
        sa.Column("scope", sa.String(255), nullable=False),
        sa.UniqueConstraint(
            "tenant_code", "service_client_id", "scope", name="uq_auth_service_client_scopes_tenant_client_scope"
        ),
    )
    op.create_index(
        "ix_auth_service_client_scopes_service_client_id", "auth_service_client_scopes", ["service_client_id"]
    )

    op.create_table(
        "auth_token_exchanges",
        *_audit_columns(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("subject_token_jti", sa.String(36), nullable=False),
        sa.Column("requested_audience", sa.Text(), nullable=False),
        sa.Column("issued_token_jti", sa.String(36), nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("tenant_code", "issued_token_jti", name="uq_auth_token_exchanges_tenant_issued_jti"),
    )
    op.create_index("ix_auth_token_exchanges_user_id", "auth_token_exchanges", ["user_id"])

    for table in TABLES:
        op.create_index(f"ix_{table}_tenant_code", table, ["tenant_code"])
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")
        op.execute(
            f"""
            CREATE POLICY {table}_tenant_isolation ON {table}
            USING (tenant_code = NULLIF(current_setting('app.tenant_id', true), '')::uuid)
            WITH CHECK (tenant_code = NULLIF(current_setting('app.tenant_id', true), '')::uuid);
            """
        )


def downgrade() -> None:
    for table in reversed(TABLES):
        op.execute(f"DROP POLICY IF EXISTS {table}_tenant_isolation ON {table};")
        op.drop_table(table)
