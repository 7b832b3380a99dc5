# (c) Copyright Datacraft, 2026
"""Reject blank product names at the database level."""
from alembic import op


def upgrade() -> None:
	op.create_check_constraint(
		'ck_product_name_not_blank',
		'product',
		"btrim(name) <> ''",
	)
