"""Declarative base with every model registered."""
from haccp_review.models.base import Base


def import_models() -> None:
    """Import all model modules so their tables are attached to ``Base.metadata``."""
    import haccp_review.models  # noqa: F401


__all__ = ["Base", "import_models"]
