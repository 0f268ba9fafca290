import pytest

from haccp_review.core.exceptions import RepositoryError
from haccp_review.models import Kitchen, Review
from haccp_review.models.base import VerificationStatus
from haccp_review.repositories.kitchen import KitchenRepository
from haccp_review.repositories.review import ReviewRepository
from haccp_review.services.common import (
    ConcurrentModificationError,
    TransactionError,
    UnitOfWork,
    conflicts_on,
)
from haccp_review.services.review import ReviewVerificationService


class TestTransactions:

    def test_commits_on_clean_exit(self, session_factory):
        with UnitOfWork(session_factory) as uow:
            uow.get_repo(KitchenRepository).create(Kitchen(name="Dapur Baru", code="KIT-NEW"))

        with UnitOfWork(session_factory) as uow:
            assert uow.get_repo(KitchenRepository).count({"code": "KIT-NEW"}) == 1

    def test_rolls_back_on_error(self, session_factory):
        with pytest.raises(RuntimeError):
            with UnitOfWork(session_factory) as uow:
                uow.get_repo(KitchenRepository).create(Kitchen(name="Dapur Gagal", code="KIT-FAIL"))
                raise RuntimeError("boom")

        with UnitOfWork(session_factory) as uow:
            assert uow.get_repo(KitchenRepository).count({"code": "KIT-FAIL"}) == 0

    def test_repository_errors_surface_as_transaction_errors(self, session_factory):
        with pytest.raises(TransactionError):
            with UnitOfWork(session_factory):
                raise RepositoryError("disk full", operation="insert")

    def test_constraint_violation_is_a_transaction_error(self, session_factory, kitchen):
        with pytest.raises(TransactionError):
            with UnitOfWork(session_factory) as uow:
                uow.get_repo(KitchenRepository).create(Kitchen(name="Duplicate", code=kitchen.code))

    def test_repositories_are_cached_per_unit(self, session_factory):
        with UnitOfWork(session_factory) as uow:
            assert uow.get_repo(ReviewRepository) is uow.get_repo(ReviewRepository)

    def test_outside_context(self, session_factory):
        uow = UnitOfWork(session_factory)
        with pytest.raises(RuntimeError):
            uow.get_repo(ReviewRepository)
        with pytest.raises(RuntimeError):
            uow.commit()


class TestOptimisticLocking:

    def test_interleaved_writers(self, session_factory, review_service, review_payload, consumer):
        review_id = review_service.submit_review(review_payload(), consumer).id

        first = UnitOfWork(session_factory)
        second = UnitOfWork(session_factory)
        with first:
            mine = first.get_repo(ReviewRepository).get_by_id(review_id)
            with pytest.raises(ConcurrentModificationError):
                with second:
                    theirs = second.get_repo(ReviewRepository).get_by_id(review_id)
                    theirs.verification_status = VerificationStatus.IN_PROGRESS
                    second.commit()

                    mine.comment = "Edited while a moderator was working on it"
                    first.commit()

        with UnitOfWork(session_factory) as uow:
            stored = uow.get_repo(ReviewRepository).get_by_id(review_id)
            assert stored.verification_status == VerificationStatus.IN_PROGRESS
            assert stored.comment == review_payload()["comment"]
            assert stored.version == 2

    def test_losing_moderator_gets_review_conflict(
        self, monkeypatch, session_factory, settings, clock, dispatcher,
        review_service, verification_service, review_payload, consumer, admin,
    ):
        review_id = review_service.submit_review(review_payload(), consumer).id
        rival = ReviewVerificationService(session_factory, settings=settings, clock=clock)

        def rival_commits_first(uow, review, moderator):
            rival.set_verification_status(review.id, "in_progress", admin)

        monkeypatch.setattr(dispatcher, "on_review_verified", rival_commits_first)

        with pytest.raises(ConcurrentModificationError) as excinfo:
            verification_service.set_verification_status(review_id, "verified", admin)

        assert (excinfo.value.resource_type, excinfo.value.identifier) == ("Review", review_id)
        stored = review_service.get_review(review_id, admin)
        assert stored.verification_status == VerificationStatus.IN_PROGRESS
        assert stored.version == 2

    def test_conflicts_keep_an_existing_identifier(self):
        with pytest.raises(ConcurrentModificationError) as excinfo:
            with conflicts_on("Notification", "n-1"):
                raise ConcurrentModificationError("Entity")
        assert excinfo.value.identifier == "n-1"

        with pytest.raises(ConcurrentModificationError) as excinfo:
            with conflicts_on("Notification", "n-1"):
                raise ConcurrentModificationError("Review", "r-9")
        assert (excinfo.value.resource_type, excinfo.value.identifier) == ("Review", "r-9")

    def test_stale_expected_version(self, review_service, verification_service, review_payload, consumer, admin):
        review = review_service.submit_review(review_payload(), consumer)
        review_service.update_review(review.id, {"comment": "Updated after a second look"}, consumer)

        with pytest.raises(ConcurrentModificationError):
            verification_service.set_verification_status(review.id, "verified", admin, expected_version=1)

        verified = verification_service.set_verification_status(review.id, "verified", admin, expected_version=2)
        assert verified.version == 3

    def test_version_increments_per_write(self, session_factory, review_service, review_payload, consumer):
        review = review_service.submit_review(review_payload(), consumer)
        review_service.update_review(review.id, {"photos": []}, consumer)

        with UnitOfWork(session_factory) as uow:
            assert uow.get_repo(ReviewRepository).get_by_id(review.id).version == 2
        assert Review.__mapper__.version_id_col is Review.__table__.c.version
