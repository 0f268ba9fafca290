from decimal import Decimal

import pytest

from haccp_review.models.base import (
    ConfidenceLevel,
    DisputeStatus,
    ReviewerType,
    VerificationStatus,
)
from haccp_review.schemas.common.pagination import PaginationParams
from haccp_review.schemas.review import ReviewFilterParams
from haccp_review.services.common import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from haccp_review.services.review import default_confidence
from haccp_review.services.review.review_service import MAX_BATCH_SIZE


class TestSubmitReview:

    def test_new_review_starts_unverified_and_undisputed(self, review_service, review_payload, consumer):
        review = review_service.submit_review(review_payload(), consumer)

        assert review.verification_status == VerificationStatus.UNVERIFIED
        assert review.verified is False
        assert review.dispute_status == DisputeStatus.NONE
        assert review.reviewer_code == "SCH-001"
        assert review.reviewer_id == "u-school-1"
        assert review.version == 1
        assert review.average_rating == Decimal("4.33")

    def test_confidence_defaults_from_report_source(self, review_service, review_payload, consumer):
        public = review_service.submit_review(review_payload(report_source="public"), consumer)
        official = review_service.submit_review(
            review_payload(report_source="official_inspector"), consumer
        )

        assert public.confidence_level == ConfidenceLevel.MEDIUM
        assert official.confidence_level == ConfidenceLevel.HIGH
        assert default_confidence("health_worker") == ConfidenceLevel.HIGH

    def test_explicit_confidence_is_kept(self, review_service, review_payload, consumer):
        review = review_service.submit_review(review_payload(confidence_level="low"), consumer)
        assert review.confidence_level == ConfidenceLevel.LOW

    def test_duplicate_root_causes_are_collapsed(self, review_service, review_payload, consumer):
        review = review_service.submit_review(
            review_payload(root_causes=["worker_hygiene", "supply_chain", "worker_hygiene"]),
            consumer,
        )
        assert [c.value for c in review.root_causes] == ["worker_hygiene", "supply_chain"]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"ratings": {"taste": "5.5"}},
            {"ratings": {"hygiene": "-0.1"}},
            {"ratings": {"freshness": "3.25"}},
            {"comment": "too short"},
            {"comment": "x" * 1001},
            {"photos": [f"https://cdn.example.org/{i}.jpg" for i in range(6)]},
            {"reviewer_type": "inspector"},
            {"root_causes": ["bad_luck"]},
            {"unexpected": "field"},
        ],
    )
    def test_invalid_payload_is_rejected(self, review_service, review_payload, consumer, overrides):
        with pytest.raises(ValidationError):
            review_service.submit_review(review_payload(**overrides), consumer)

    def test_boundary_values_are_accepted(self, review_service, review_payload, consumer):
        review = review_service.submit_review(
            review_payload(
                ratings={"taste": "0.0", "packaging": "5.0"},
                comment="x" * 10,
                photos=[f"https://cdn.example.org/{i}.jpg" for i in range(5)],
            ),
            consumer,
        )
        assert review.ratings.taste == Decimal("0.0")
        assert len(review.photos) == 5

    def test_unknown_kitchen(self, review_service, review_payload, consumer):
        with pytest.raises(NotFoundError):
            review_service.submit_review(review_payload(kitchen_id="missing-kitchen"), consumer)


class TestUpdateAndDelete:

    def test_author_updates_content(self, review_service, review_payload, consumer):
        review = review_service.submit_review(review_payload(), consumer)

        updated = review_service.update_review(
            review.id,
            {"comment": "Rice was undercooked today.", "ratings": {**review_payload()["ratings"], "taste": "2.0"}},
            consumer,
        )

        assert updated.comment == "Rice was undercooked today."
        assert updated.ratings.taste == Decimal("2.0")
        assert updated.version == 2

    def test_only_author_may_update(self, review_service, review_payload, consumer, other_consumer):
        review = review_service.submit_review(review_payload(), consumer)
        with pytest.raises(ForbiddenError):
            review_service.update_review(review.id, {"comment": "Someone else's words"}, other_consumer)

    def test_explicit_null_is_rejected(self, review_service, review_payload, consumer):
        review = review_service.submit_review(review_payload(), consumer)
        with pytest.raises(ValidationError):
            review_service.update_review(review.id, {"comment": None}, consumer)

    def test_identity_fields_cannot_change(self, review_service, review_payload, consumer):
        review = review_service.submit_review(review_payload(), consumer)
        with pytest.raises(ValidationError):
            review_service.update_review(review.id, {"kitchen_id": "elsewhere"}, consumer)

    def test_verified_review_is_frozen(self, review_service, verified_review, consumer):
        review = verified_review()
        with pytest.raises(ForbiddenError):
            review_service.update_review(review.id, {"comment": "Changed my mind entirely"}, consumer)
        with pytest.raises(ForbiddenError):
            review_service.delete_review(review.id, consumer)

    def test_delete_removes_review(self, review_service, review_payload, consumer):
        review = review_service.submit_review(review_payload(), consumer)
        review_service.delete_review(review.id, consumer)

        with pytest.raises(NotFoundError):
            review_service.get_review(review.id, consumer)


class TestVerification:

    def test_forward_progression(self, review_service, verification_service, review_payload, consumer, admin):
        review = review_service.submit_review(review_payload(), consumer)

        in_progress = verification_service.set_verification_status(review.id, "in_progress", admin)
        assert in_progress.verification_status == VerificationStatus.IN_PROGRESS
        assert in_progress.verified is False

        verified = verification_service.set_verification_status(review.id, "verified", admin)
        assert verified.verification_status == VerificationStatus.VERIFIED
        assert verified.verified is True

        detail = review_service.get_review(review.id, admin)
        assert detail.verified_by == "ADM-001"
        assert detail.verified_at is not None

    def test_unverified_may_skip_to_verified(self, verified_review):
        assert verified_review().verified is True

    @pytest.mark.parametrize("target", ["in_progress", "unverified", "verified"])
    def test_no_move_out_of_verified(self, verification_service, verified_review, admin, target):
        review = verified_review()
        with pytest.raises(InvalidTransitionError):
            verification_service.set_verification_status(review.id, target, admin)

    def test_same_state_is_rejected(self, review_service, verification_service, review_payload, consumer, admin):
        review = review_service.submit_review(review_payload(), consumer)
        with pytest.raises(InvalidTransitionError):
            verification_service.set_verification_status(review.id, "unverified", admin)

    def test_non_admin_cannot_moderate(self, review_service, verification_service, review_payload, consumer, kitchen_user):
        review = review_service.submit_review(review_payload(), consumer)
        with pytest.raises(ForbiddenError):
            verification_service.set_verification_status(review.id, "verified", kitchen_user)

    def test_draft_cannot_be_moderated(self, review_service, verification_service, review_payload, consumer, admin):
        review = review_service.submit_review(review_payload(is_draft=True), consumer)
        with pytest.raises(InvalidTransitionError):
            verification_service.set_verification_status(review.id, "verified", admin)

    def test_unknown_review(self, verification_service, admin):
        with pytest.raises(NotFoundError):
            verification_service.set_verification_status("nope", "verified", admin)

    def test_reject_annotates_unverified_review(self, review_service, verification_service, review_payload, consumer, admin):
        review = review_service.submit_review(review_payload(), consumer)

        rejected = verification_service.reject_review(review.id, admin, "Photo does not match the menu")

        assert rejected.rejection_note == "Photo does not match the menu"
        assert rejected.rejected_by == "ADM-001"
        assert rejected.verification_status == VerificationStatus.UNVERIFIED

    def test_reject_after_moderation_started(self, review_service, verification_service, review_payload, consumer, admin):
        review = review_service.submit_review(review_payload(), consumer)
        verification_service.set_verification_status(review.id, "in_progress", admin)

        with pytest.raises(InvalidTransitionError):
            verification_service.reject_review(review.id, admin, "Too late")


class TestReads:

    def test_drafts_are_private(self, review_service, review_payload, consumer, other_consumer, admin):
        draft = review_service.submit_review(review_payload(is_draft=True), consumer)

        assert review_service.get_review(draft.id, consumer).is_draft is True
        assert review_service.get_review(draft.id, admin).id == draft.id
        with pytest.raises(ForbiddenError):
            review_service.get_review(draft.id, other_consumer)

    def test_public_listing_shows_verified_only(self, review_service, verified_review, review_payload, consumer, kitchen):
        verified = verified_review()
        review_service.submit_review(review_payload(), consumer)

        page = review_service.list_public_reviews(kitchen.id)

        assert [r.id for r in page.items] == [verified.id]
        assert page.meta.total_items == 1

    def test_filtered_listing(self, review_service, verified_review, review_payload, consumer, kitchen):
        low = review_service.submit_review(
            review_payload(ratings={k: "2.0" for k in ("taste", "hygiene", "freshness")}), consumer
        )
        high = review_service.submit_review(review_payload(), consumer)
        verified_review(reviewer_type="supplier")

        by_rating = review_service.list_kitchen_reviews(
            kitchen.id, ReviewFilterParams(verified=False, sort="average_rating", order="asc")
        )
        assert [r.id for r in by_rating.items] == [low.id, high.id]

        above_four = review_service.list_kitchen_reviews(kitchen.id, ReviewFilterParams(min_rating=Decimal("4.0")))
        assert low.id not in {r.id for r in above_four.items}

        suppliers = review_service.list_kitchen_reviews(
            kitchen.id, ReviewFilterParams(reviewer_type=ReviewerType.SUPPLIER)
        )
        assert suppliers.meta.total_items == 1

    def test_listing_pages(self, review_service, review_payload, consumer, kitchen):
        for _ in range(3):
            review_service.submit_review(review_payload(), consumer)

        page = review_service.list_kitchen_reviews(kitchen.id, pagination=PaginationParams(page=2, page_size=2))

        assert len(page.items) == 1
        assert page.meta.total_pages == 2
        assert page.meta.has_previous is True

    def test_empty_listing_is_not_an_error(self, review_service, kitchen):
        assert review_service.list_kitchen_reviews(kitchen.id).items == []


class TestBatch:

    def test_items_succeed_or_fail_independently(self, review_service, review_payload, consumer):
        result = review_service.submit_batch(
            [review_payload(), review_payload(kitchen_id="missing"), review_payload(comment="short")],
            consumer,
        )

        assert result.created == 1
        assert result.failed == 2
        assert [r.status for r in result.results] == ["created", "failed", "failed"]
        assert result.results[0].review_id is not None
        assert result.results[1].error

    def test_batch_size_is_capped(self, review_service, review_payload, consumer):
        with pytest.raises(ValidationError):
            review_service.submit_batch([review_payload()] * (MAX_BATCH_SIZE + 1), consumer)

    def test_empty_batch(self, review_service, consumer):
        with pytest.raises(ValidationError):
            review_service.submit_batch([], consumer)
