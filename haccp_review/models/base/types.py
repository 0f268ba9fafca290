"""
Column type helpers shared by the models.
"""

import enum
from typing import Type

from sqlalchemy import JSON, Enum
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def enum_column(enum_cls: Type[enum.Enum], length: int = 32) -> Enum:
    """
    VARCHAR-backed enum storing member values with a CHECK constraint.

    Values (not member names) are persisted so the stored strings match
    the wire format, e.g. ``in_progress`` or ``UnderReview``.
    """
    return Enum(
        enum_cls,
        name=f"{enum_cls.__name__.lower()}_enum",
        native_enum=False,
        create_constraint=True,
        length=length,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
