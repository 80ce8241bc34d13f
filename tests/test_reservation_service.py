from datetime import timedelta

import pytest

from library_backend.errors import ConflictError, ForbiddenError, NotFoundError, PolicyViolation
from library_backend.extensions import db, mail
from library_backend.models import Notification, NotificationLog, Reservation, ReservationStatus, UserRoles
from library_backend.services.loan_service import LoanService
from library_backend.services.reservation_service import ReservationService
from library_backend.utils.timeutil import utcnow


def _reserve(user, book):
    return ReservationService.create_reservation(user.id, book.id, requesting_user_id=user.id)


def test_create_reservation_is_pending(make_user, make_book):
    user = make_user()
    book = make_book(quantity=0)

    r = _reserve(user, book)

    assert r.status == ReservationStatus.PENDING
    assert r.created_at is not None
    assert r.expiration_date is None


def test_create_reservation_for_someone_else_is_forbidden(make_user, make_book):
    x, y = make_user(), make_user()
    book = make_book(quantity=0)

    with pytest.raises(ForbiddenError):
        ReservationService.create_reservation(y.id, book.id, requesting_user_id=x.id)
    assert Reservation.query.count() == 0


def test_duplicate_pending_reservation_is_rejected(make_user, make_book):
    user = make_user()
    book = make_book(quantity=0)
    _reserve(user, book)

    with pytest.raises(ConflictError):
        _reserve(user, book)
    assert Reservation.query.filter_by(user_id=user.id, book_id=book.id).count() == 1


def test_reservation_requires_a_stock_row(make_user, make_book):
    user = make_user()
    book = make_book(quantity=None)

    with pytest.raises(PolicyViolation, match="No stock configured"):
        _reserve(user, book)


def test_pending_for_book_is_oldest_first(make_user, make_book):
    book = make_book(quantity=0)
    first, second, third = make_user(), make_user(), make_user()

    r2 = _reserve(second, book)
    r1 = _reserve(first, book)
    r3 = _reserve(third, book)
    now = utcnow()
    r1.created_at = now - timedelta(hours=3)
    r2.created_at = now - timedelta(hours=2)
    r3.created_at = now - timedelta(hours=1)
    db.session.commit()

    assert [r.id for r in ReservationService.get_pending_for_book(book.id)] == [r1.id, r2.id, r3.id]


def test_return_promotes_oldest_pending_reservation(make_user, make_book):
    book = make_book(quantity=1, title="Dune")
    borrower, late, early = make_user(), make_user(), make_user()
    loan = LoanService.create_loan(borrower.id, book.id)

    r_late = _reserve(late, book)
    r_early = _reserve(early, book)
    r_early.created_at = r_late.created_at - timedelta(minutes=5)
    db.session.commit()

    with mail.record_messages() as outbox:
        _, notified = LoanService.return_loan(loan.id)

    assert notified is True
    db.session.expire_all()
    assert r_early.status == ReservationStatus.AVAILABLE
    assert r_early.assigned_stock_id == book.stock.id
    assert r_early.expiration_date == r_early.available_at + timedelta(hours=48)
    assert r_late.status == ReservationStatus.PENDING

    # the returned copy is held for the reserver
    assert book.stock.quantity == 0

    inbox = Notification.query.filter_by(user_id=early.id).all()
    assert len(inbox) == 1
    assert "available" in inbox[0].message
    assert "Dune" in inbox[0].message
    assert len(outbox) == 1
    assert outbox[0].recipients == [early.email]


def test_scenario_duplicate_then_available_after_return(make_user, make_book):
    book = make_book(quantity=1)
    holder, v = make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)

    r = _reserve(v, book)
    with pytest.raises(ConflictError):
        _reserve(v, book)

    _, notified = LoanService.return_loan(loan.id)

    assert notified is True
    db.session.expire_all()
    assert r.status == ReservationStatus.AVAILABLE
    messages = [n.message for n in Notification.query.filter_by(user_id=v.id)]
    assert any("available" in m for m in messages)


def test_held_copy_is_lent_to_the_reserver(make_user, make_book):
    book = make_book(quantity=1)
    holder, v, other = make_user(), make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)
    r = _reserve(v, book)
    LoanService.return_loan(loan.id)

    with pytest.raises(PolicyViolation, match="Book unavailable"):
        LoanService.create_loan(other.id, book.id)

    LoanService.create_loan(v.id, book.id)

    db.session.expire_all()
    assert r.status == ReservationStatus.COMPLETED
    assert book.stock.quantity == 0


def test_notification_failure_does_not_undo_return(make_user, make_book, monkeypatch):
    book = make_book(quantity=1)
    holder, v = make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)
    r = _reserve(v, book)

    def boom(*args, **kwargs):
        raise RuntimeError("smtp down")

    monkeypatch.setattr("library_backend.services.notification_service.MailService.send_and_log", boom)

    returned, notified = LoanService.return_loan(loan.id)

    assert notified is True
    db.session.expire_all()
    assert returned.return_date is not None
    assert r.status == ReservationStatus.AVAILABLE


def test_cancelling_available_reservation_passes_copy_on(make_user, make_book):
    book = make_book(quantity=1)
    holder, first, second = make_user(), make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)
    r1 = _reserve(first, book)
    r2 = _reserve(second, book)
    r2.created_at = r1.created_at + timedelta(seconds=1)
    db.session.commit()
    LoanService.return_loan(loan.id)

    ReservationService.update_reservation(r1.id, {"status": "Cancelled"})

    db.session.expire_all()
    assert r1.status == ReservationStatus.CANCELLED
    assert r2.status == ReservationStatus.AVAILABLE
    assert book.stock.quantity == 0


def test_invalid_status_transition(make_user, make_book):
    r = _reserve(make_user(), make_book(quantity=0))

    with pytest.raises(PolicyViolation):
        ReservationService.update_reservation(r.id, {"status": "Completed"})
    with pytest.raises(PolicyViolation):
        ReservationService.update_reservation(r.id, {"status": "Lost"})

    ReservationService.update_reservation(r.id, {"status": "Cancelled"})
    with pytest.raises(PolicyViolation):
        ReservationService.update_reservation(r.id, {"status": "Pending"})


def test_update_missing_reservation(app):
    with pytest.raises(NotFoundError):
        ReservationService.update_reservation(42, {"status": "Cancelled"})


def test_delete_reservation_owner_or_staff(make_user, make_book):
    owner, stranger = make_user(), make_user()
    book = make_book(quantity=0)
    r = _reserve(owner, book)

    with pytest.raises(ForbiddenError):
        ReservationService.delete_reservation(r.id, requesting_user_id=stranger.id, role=UserRoles.USER)

    ReservationService.delete_reservation(r.id, requesting_user_id=stranger.id, role=UserRoles.LIBRARIAN)
    assert db.session.get(Reservation, r.id) is None

    r = _reserve(owner, book)
    ReservationService.delete_reservation(r.id, requesting_user_id=owner.id, role=UserRoles.USER)
    assert Reservation.query.count() == 0

    with pytest.raises(NotFoundError):
        ReservationService.delete_reservation(r.id, requesting_user_id=owner.id)


def test_cleanup_expired_releases_copy(make_user, make_book):
    book = make_book(quantity=1)
    holder, v = make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)
    r = _reserve(v, book)
    LoanService.return_loan(loan.id)

    assert ReservationService.cleanup_expired(utcnow()) == 0

    count = ReservationService.cleanup_expired(utcnow() + timedelta(hours=49))

    assert count == 1
    db.session.expire_all()
    assert r.status == ReservationStatus.CANCELLED
    assert book.stock.quantity == 1
    assert book.stock.is_available is True


def test_pending_reservation_allowed_again_after_cancel(make_user, make_book):
    user = make_user()
    book = make_book(quantity=0)
    r = _reserve(user, book)
    ReservationService.update_reservation(r.id, {"status": "Cancelled"})

    again = _reserve(user, book)
    assert again.status == ReservationStatus.PENDING


def test_mail_attempts_are_logged(make_user, make_book):
    book = make_book(quantity=1)
    holder, v = make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)
    _reserve(v, book)
    LoanService.return_loan(loan.id)

    logs = NotificationLog.query.filter_by(user_id=v.id).all()
    assert [(log.type, log.success) for log in logs] == [("ReservationAvailable", True)]


def test_marking_available_by_hand_needs_a_free_copy(make_user, make_book):
    book = make_book(quantity=0)
    r = _reserve(make_user(), book)

    with pytest.raises(PolicyViolation, match="Book unavailable"):
        ReservationService.update_reservation(r.id, {"status": "Available"})

    db.session.expire_all()
    assert r.status == ReservationStatus.PENDING
    assert r.assigned_stock_id is None

    ReservationService.update_reservation(r.id, {"status": "Cancelled"})
    db.session.expire_all()
    assert book.stock.quantity == 0


def test_marking_available_by_hand_holds_a_copy(make_user, make_book):
    book = make_book(quantity=1)
    v, other = make_user(), make_user()
    r = _reserve(v, book)

    ReservationService.update_reservation(r.id, {"status": "Available"})

    db.session.expire_all()
    assert r.status == ReservationStatus.AVAILABLE
    assert r.assigned_stock_id == book.stock.id
    assert r.expiration_date == r.available_at + timedelta(hours=48)
    assert book.stock.quantity == 0
    assert Notification.query.filter_by(user_id=v.id).count() == 1

    with pytest.raises(PolicyViolation, match="Book unavailable"):
        LoanService.create_loan(other.id, book.id)

    loan = LoanService.create_loan(v.id, book.id)
    db.session.expire_all()
    assert r.status == ReservationStatus.COMPLETED
    assert book.stock.quantity == 0

    LoanService.return_loan(loan.id)
    db.session.expire_all()
    assert book.stock.quantity == 1


def test_available_reservation_cannot_be_completed_by_hand(make_user, make_book):
    book = make_book(quantity=1)
    holder, v = make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)
    r = _reserve(v, book)
    LoanService.return_loan(loan.id)

    with pytest.raises(PolicyViolation):
        ReservationService.update_reservation(r.id, {"status": "Completed"})

    db.session.expire_all()
    assert r.status == ReservationStatus.AVAILABLE
    assert book.stock.quantity == 0


def test_available_row_without_held_copy_leaves_stock_alone(make_user, make_book):
    book = make_book(quantity=0)
    v = make_user()
    r = _reserve(v, book)
    r.status = ReservationStatus.AVAILABLE
    db.session.commit()

    with pytest.raises(PolicyViolation, match="Book unavailable"):
        LoanService.create_loan(v.id, book.id)

    ReservationService.update_reservation(r.id, {"status": "Cancelled"})
    db.session.expire_all()
    assert book.stock.quantity == 0
    assert book.stock.is_available is False


def test_deleting_available_reservation_passes_copy_on(make_user, make_book):
    book = make_book(quantity=1)
    holder, first, second = make_user(), make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)
    r1 = _reserve(first, book)
    r2 = _reserve(second, book)
    r2.created_at = r1.created_at + timedelta(seconds=1)
    db.session.commit()
    LoanService.return_loan(loan.id)

    ReservationService.delete_reservation(r1.id, requesting_user_id=first.id, role=UserRoles.USER)

    db.session.expire_all()
    assert db.session.get(Reservation, r1.id) is None
    assert r2.status == ReservationStatus.AVAILABLE
    assert r2.assigned_stock_id == book.stock.id
    assert book.stock.quantity == 0


def test_deleting_last_held_reservation_restocks(make_user, make_book):
    book = make_book(quantity=1)
    holder, v = make_user(), make_user()
    loan = LoanService.create_loan(holder.id, book.id)
    r = _reserve(v, book)
    LoanService.return_loan(loan.id)

    ReservationService.delete_reservation(r.id, requesting_user_id=v.id, role=UserRoles.USER)

    db.session.expire_all()
    assert book.stock.quantity == 1
    assert book.stock.is_available is True


def test_lending_settles_every_hold_on_the_book(make_user, make_book):
    book = make_book(quantity=2)
    a, b, v, w = make_user(), make_user(), make_user(), make_user()
    loan_a = LoanService.create_loan(a.id, book.id)
    loan_b = LoanService.create_loan(b.id, book.id)

    first = _reserve(v, book)
    LoanService.return_loan(loan_a.id)
    second = _reserve(v, book)
    later = _reserve(w, book)
    LoanService.return_loan(loan_b.id)

    db.session.expire_all()
    assert first.status == ReservationStatus.AVAILABLE
    assert second.status == ReservationStatus.AVAILABLE
    assert later.status == ReservationStatus.PENDING

    LoanService.create_loan(v.id, book.id)

    db.session.expire_all()
    assert first.status == ReservationStatus.COMPLETED
    assert second.status == ReservationStatus.CANCELLED
    assert later.status == ReservationStatus.AVAILABLE
    assert book.stock.quantity == 0
