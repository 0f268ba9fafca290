from haccp_review.repositories.kitchen.kitchen_repository import IncidentRepository, KitchenRepository

__all__ = ["KitchenRepository", "IncidentRepository"]
