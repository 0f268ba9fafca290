from haccp_review.models.kitchen.kitchen import Incident, Kitchen, format_location

__all__ = ["Kitchen", "Incident", "format_location"]
