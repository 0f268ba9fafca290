# haccp_review/services/review/performance_badge_service.py
from __future__ import annotations

from typing import Any, Callable, List, Mapping, Union

from sqlalchemy.orm import Session

from haccp_review.config.logging import get_logger
from haccp_review.models.review import PerformanceBadge
from haccp_review.repositories.kitchen import KitchenRepository
from haccp_review.repositories.review import PerformanceBadgeRepository
from haccp_review.schemas.review import BadgeCreate, BadgeResponse
from haccp_review.services.common import NotFoundError, Principal, UnitOfWork, require_admin
from haccp_review.services.common.mapping import coerce_input

logger = get_logger(__name__)


class PerformanceBadgeService:
    """
    Award and list kitchen performance badges.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def _get_repo(self, uow: UnitOfWork) -> PerformanceBadgeRepository:
        return uow.get_repo(PerformanceBadgeRepository)

    def _ensure_kitchen(self, uow: UnitOfWork, kitchen_id: str) -> None:
        if uow.get_repo(KitchenRepository).find_by_id(kitchen_id) is None:
            raise NotFoundError("Kitchen", kitchen_id)

    def award_badge(
        self,
        kitchen_id: str,
        data: Union[BadgeCreate, Mapping[str, Any]],
        moderator: Principal,
    ) -> BadgeResponse:
        require_admin(moderator, action="award badges")
        payload = coerce_input(data, BadgeCreate)

        with UnitOfWork(self._session_factory) as uow:
            self._ensure_kitchen(uow, kitchen_id)
            badge = PerformanceBadge(
                kitchen_id=kitchen_id,
                type=payload.type,
                title=payload.title,
                description=payload.description,
                earned_date=payload.earned_date,
                awarded_by=moderator.code,
            )
            self._get_repo(uow).create(badge)
            logger.info(
                f"Badge {badge.type.value} awarded to kitchen {kitchen_id} by {moderator.code}",
                extra={"kitchen_id": kitchen_id},
            )
            return BadgeResponse.model_validate(badge)

    def list_badges(self, kitchen_id: str) -> List[BadgeResponse]:
        with UnitOfWork(self._session_factory) as uow:
            self._ensure_kitchen(uow, kitchen_id)
            return [BadgeResponse.model_validate(b) for b in self._get_repo(uow).list_for_kitchen(kitchen_id)]
