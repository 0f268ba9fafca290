import pytest

from haccp_review.models.base import (
    ActorRole,
    HaccpCategory,
    NotificationPriority,
    NotificationStatus,
    TargetRole,
    VerificationStatus,
)
from haccp_review.schemas.common.pagination import PaginationParams
from haccp_review.services.common import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    Principal,
    ServiceError,
)
from haccp_review.services.notification import NotificationDispatcher
from haccp_review.services.review import ReviewVerificationService


class TestDispatchOnVerification:

    def test_low_taste_rating_raises_critical_kitchen_notification(self, dispatcher, verified_review, admin):
        review = verified_review(ratings={"taste": "1.5"})

        [notification] = dispatcher.list_for_actor(admin)

        assert notification.review_id == review.id
        assert notification.category == HaccpCategory.TASTE
        assert notification.priority == NotificationPriority.CRITICAL
        assert notification.target_role == TargetRole.KITCHEN
        assert notification.status == NotificationStatus.NEW
        assert notification.kitchen_code == "KIT-BDG-01"
        assert notification.created_by == "SCH-001"
        assert notification.school_code == "SCH-001"
        assert notification.title == "[CRITICAL] Taste issue at Dapur Sehat Bandung"

        detail = dispatcher.get_notification(notification.id, admin)
        assert [(e.action.value, e.user_code) for e in detail.audit_trail] == [("Created", "ADM-001")]

    def test_good_review_raises_nothing(self, dispatcher, verified_review, admin):
        verified_review()
        assert dispatcher.list_for_actor(admin) == []

    def test_in_progress_raises_nothing(self, dispatcher, review_service, verification_service, review_payload, consumer, admin):
        review = review_service.submit_review(review_payload(ratings={"taste": "1.5"}), consumer)
        verification_service.set_verification_status(review.id, "in_progress", admin)
        assert dispatcher.list_for_actor(admin) == []

    def test_official_inspection_is_addressed_to_all(self, dispatcher, verified_review, supplier):
        verified_review(report_source="official_inspector", root_causes=["cross_contamination"])

        [notification] = dispatcher.list_for_actor(supplier)
        assert notification.target_role == TargetRole.ALL
        assert notification.priority == NotificationPriority.CRITICAL

    def test_failed_dispatch_rolls_back_verification(self, session_factory, settings, clock, review_service, review_payload, consumer, admin):
        class BrokenDispatcher(NotificationDispatcher):
            def on_review_verified(self, uow, review, moderator):
                raise ServiceError("notification store unavailable")

        service = ReviewVerificationService(
            session_factory,
            dispatcher=BrokenDispatcher(session_factory, settings=settings, clock=clock),
            settings=settings,
            clock=clock,
        )
        review = review_service.submit_review(review_payload(ratings={"taste": "1.5"}), consumer)

        with pytest.raises(ServiceError):
            service.set_verification_status(review.id, "verified", admin)

        assert review_service.get_review(review.id, admin).verification_status == VerificationStatus.UNVERIFIED


class TestStatusChanges:

    @pytest.fixture
    def notification(self, dispatcher, verified_review, admin):
        verified_review(ratings={"hygiene": "2.5"})
        return dispatcher.list_for_actor(admin)[0]

    def test_view_then_resolve(self, dispatcher, notification, kitchen_user):
        viewed = dispatcher.mark_viewed(notification.id, kitchen_user)
        assert viewed.status == NotificationStatus.VIEWED

        resolved = dispatcher.mark_resolved(notification.id, kitchen_user)
        assert resolved.status == NotificationStatus.RESOLVED

        trail = dispatcher.get_notification(notification.id, kitchen_user).audit_trail
        assert [e.action.value for e in trail] == ["Created", "Viewed", "Resolved"]
        assert trail[1].user_code == "KIT-BDG-01"

    def test_repeated_changes_are_recorded_once(self, dispatcher, notification, kitchen_user):
        dispatcher.mark_viewed(notification.id, kitchen_user)
        dispatcher.mark_viewed(notification.id, kitchen_user)
        dispatcher.mark_resolved(notification.id, kitchen_user)
        again = dispatcher.mark_resolved(notification.id, kitchen_user)

        assert again.status == NotificationStatus.RESOLVED
        trail = dispatcher.get_notification(notification.id, kitchen_user).audit_trail
        assert [e.action.value for e in trail] == ["Created", "Viewed", "Resolved"]

    def test_new_may_resolve_directly(self, dispatcher, notification, kitchen_user):
        assert dispatcher.mark_resolved(notification.id, kitchen_user).status == NotificationStatus.RESOLVED

    def test_resolved_cannot_be_viewed(self, dispatcher, notification, kitchen_user):
        dispatcher.mark_resolved(notification.id, kitchen_user)
        with pytest.raises(InvalidTransitionError):
            dispatcher.mark_viewed(notification.id, kitchen_user)

    def test_invisible_notification_cannot_be_changed(self, dispatcher, notification, supplier):
        with pytest.raises(ForbiddenError):
            dispatcher.mark_viewed(notification.id, supplier)

    def test_unknown_notification(self, dispatcher, kitchen_user):
        with pytest.raises(NotFoundError):
            dispatcher.mark_viewed("missing", kitchen_user)

    def test_unread_count(self, dispatcher, notification, kitchen_user):
        assert dispatcher.unread_count(kitchen_user) == 1
        dispatcher.mark_viewed(notification.id, kitchen_user)
        assert dispatcher.unread_count(kitchen_user) == 0


class TestVisibility:

    def test_list_is_scoped_to_actor(self, dispatcher, verified_review, admin, kitchen_user, supplier, consumer, other_consumer):
        verified_review(ratings={"temperature": "2.0"})

        assert len(dispatcher.list_for_actor(admin)) == 1
        assert len(dispatcher.list_for_actor(kitchen_user)) == 1
        assert len(dispatcher.list_for_actor(consumer)) == 1
        assert dispatcher.list_for_actor(supplier) == []
        assert dispatcher.list_for_actor(other_consumer) == []

    def test_school_sees_its_own_reports(self, dispatcher, verified_review):
        verified_review(ratings={"temperature": "2.0"})
        school = Principal(user_id="u-school-admin", code="SCH-001", role=ActorRole.SCHOOL)
        assert len(dispatcher.list_for_actor(school)) == 1

    def test_newest_first_and_filtered_by_status(self, dispatcher, verified_review, admin):
        first = verified_review(ratings={"taste": "2.0"})
        second = verified_review(ratings={"taste": "3.0"})

        listed = dispatcher.list_for_actor(admin)
        assert [n.review_id for n in listed] == [second.id, first.id]

        dispatcher.mark_viewed(listed[0].id, admin)
        new_only = dispatcher.list_for_actor(admin, status=NotificationStatus.NEW)
        assert [n.review_id for n in new_only] == [first.id]

        page = dispatcher.list_for_actor(admin, pagination=PaginationParams(page=2, page_size=1))
        assert [n.review_id for n in page] == [first.id]

    def test_invisible_detail_is_forbidden(self, dispatcher, verified_review, admin, other_consumer):
        verified_review(ratings={"taste": "2.0"})
        [notification] = dispatcher.list_for_actor(admin)
        with pytest.raises(ForbiddenError):
            dispatcher.get_notification(notification.id, other_consumer)
