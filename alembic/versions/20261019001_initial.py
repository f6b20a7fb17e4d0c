"""Initial clinic schema."""

from alembic import op
import sqlalchemy as sa

revision = "20261019001"
down_revision = None
branch_labels = None
depends_on = None

appointment_status = sa.Enum(
    "Pending", "Completed", "Cancelled", name="appointment_status"
)
invoice_status = sa.Enum("Unpaid", "Partial", "Paid", name="invoice_status")


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("medical_history", sa.Text(), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_patients"),
    )

    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("min_quantity", sa.Integer(), server_default=sa.text("10"), nullable=False),
        sa.Column("unit", sa.Text(), nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_inventory"),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column(
            "status",
            appointment_status,
            server_default=sa.text("'Pending'"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_appointments"),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"], unique=False)

    op.create_table(
        "treatments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("appointment_id", sa.Integer(), nullable=True),
        sa.Column("tooth_number", sa.Integer(), nullable=True),
        sa.Column("procedure_name", sa.Text(), nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("date", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_treatments"),
    )
    op.create_index("ix_treatments_patient_id", "treatments", ["patient_id"], unique=False)

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "paid_amount", sa.Numeric(12, 2), server_default=sa.text("0"), nullable=False
        ),
        sa.Column(
            "status",
            invoice_status,
            server_default=sa.text("'Unpaid'"),
            nullable=False,
        ),
        sa.Column("payment_method", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_invoices"),
    )
    op.create_index("ix_invoices_patient_id", "invoices", ["patient_id"], unique=False)

    op.create_table(
        "xrays",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_xrays"),
    )
    op.create_index("ix_xrays_patient_id", "xrays", ["patient_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_xrays_patient_id", table_name="xrays")
    op.drop_table("xrays")
    op.drop_index("ix_invoices_patient_id", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_treatments_patient_id", table_name="treatments")
    op.drop_table("treatments")
    op.drop_index("ix_appointments_patient_id", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("inventory")
    op.drop_table("patients")
    invoice_status.drop(op.get_bind(), checkfirst=True)
    appointment_status.drop(op.get_bind(), checkfirst=True)
