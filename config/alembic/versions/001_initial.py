"""Initial schema: variant tables, operation tables, accession counters.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None

SUBMITTED_TABLES = ("submitted_variants", "dbsnp_submitted_variants")
CLUSTERED_TABLES = ("clustered_variants", "dbsnp_clustered_variants")
OPERATION_TABLES = {
    "submitted_variant_operations": "valid_submitted_event_type",
    "dbsnp_submitted_variant_operations": "valid_dbsnp_submitted_event_type",
    "clustered_variant_operations": "valid_clustered_event_type",
    "dbsnp_clustered_variant_operations": "valid_dbsnp_clustered_event_type",
}
EVENT_TYPES = "'MERGED', 'UPDATED', 'DEPRECATED', 'RS_SPLIT_CANDIDATE'"


def upgrade() -> None:
    for table in SUBMITTED_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.String(40), primary_key=True),
            sa.Column("accession", sa.BigInteger(), nullable=False),
            sa.Column("assembly_accession", sa.String(), nullable=False),
            sa.Column("taxonomy_accession", sa.Integer(), nullable=False),
            sa.Column("project_accession", sa.String(), nullable=False),
            sa.Column("contig", sa.String(), nullable=False),
            sa.Column("start", sa.BigInteger(), nullable=False),
            sa.Column("reference_allele", sa.String(), nullable=False),
            sa.Column("alternate_allele", sa.String(), nullable=False),
            sa.Column("clustered_variant_accession", sa.BigInteger(), nullable=True),
            sa.Column("remapped_from", sa.String(), nullable=True),
            sa.Column("validated", sa.Boolean(), nullable=False),
            sa.Column("created_date", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        )
        op.create_index(f"ix_{table}_accession", table, ["accession"])
        op.create_index(f"ix_{table}_assembly_accession", table, ["assembly_accession"])
        op.create_index(f"ix_{table}_clustered_variant_accession", table, ["clustered_variant_accession"])

    for table in CLUSTERED_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.String(40), primary_key=True),
            sa.Column("accession", sa.BigInteger(), nullable=False),
            sa.Column("assembly_accession", sa.String(), nullable=False),
            sa.Column("taxonomy_accession", sa.Integer(), nullable=False),
            sa.Column("contig", sa.String(), nullable=False),
            sa.Column("start", sa.BigInteger(), nullable=False),
            sa.Column("type", sa.String(), nullable=False),
            sa.Column("validated", sa.Boolean(), nullable=False),
            sa.Column("map_weight", sa.Integer(), nullable=True),
            sa.Column("created_date", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        )
        op.create_index(f"ix_{table}_accession", table, ["accession"])
        op.create_index(f"ix_{table}_assembly_accession", table, ["assembly_accession"])

    for table, constraint in OPERATION_TABLES.items():
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("event_type", sa.String(), nullable=False),
            sa.Column("accession", sa.BigInteger(), nullable=False),
            sa.Column("merge_into", sa.BigInteger(), nullable=True),
            sa.Column("reason", sa.Text(), nullable=False),
            sa.Column("inactive_objects", sa.JSON(), nullable=False),
            sa.Column("created_date", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.CheckConstraint(f"event_type IN ({EVENT_TYPES})", name=constraint),
        )
        op.create_index(f"ix_{table}_accession", table, ["accession"])

    op.create_table(
        "accession_counters",
        sa.Column("category_id", sa.String(), primary_key=True),
        sa.Column("last_committed", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade() -> None:
    op.drop_table("accession_counters")
    for table in OPERATION_TABLES:
        op.drop_index(f"ix_{table}_accession", table_name=table)
        op.drop_table(table)
    for table in CLUSTERED_TABLES:
        op.drop_index(f"ix_{table}_assembly_accession", table_name=table)
        op.drop_index(f"ix_{table}_accession", table_name=table)
        op.drop_table(table)
    for table in SUBMITTED_TABLES:
        op.drop_index(f"ix_{table}_clustered_variant_accession", table_name=table)
        op.drop_index(f"ix_{table}_assembly_accession", table_name=table)
        op.drop_index(f"ix_{table}_accession", table_name=table)
        op.drop_table(table)
