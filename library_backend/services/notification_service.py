from datetime import timedelta
import math

from flask import current_app

from library_backend.extensions import db
from library_backend.models.notification import Notification, NotificationType
from library_backend.repositories.loan_repo import LoanRepo
from library_backend.repositories.notification_repo import NotificationRepo
from library_backend.repositories.user_repo import UserRepo
from library_backend.services.mail_service import MailService
from library_backend.utils.timeutil import utcnow

DEFAULT_TITLE = "Library notification"


class NotificationService:
    @staticmethod
    def notify_user(
        user_id: int,
        message: str,
        notif_type: NotificationType = NotificationType.CUSTOM,
        title: str = DEFAULT_TITLE,
        loan_id: int = None,
    ) -> bool:
        """
        Delivers ``message`` to the user's in-app inbox and by e-mail.
        Returns False when the user does not exist.
        """
        if not message or not message.strip():
            raise ValueError("Notification message cannot be empty.")

        user = UserRepo.get_by_id(user_id)
        if user is None:
            return False

        NotificationRepo.add(Notification(
            user_id=user.id,
            type=notif_type.value,
            title=title,
            message=message,
            timestamp=utcnow(),
        ))
        MailService.send_and_log(user, title, message, notif_type.value, loan_id=loan_id)
        db.session.commit()

        current_app.logger.info(f"[notifications] {notif_type.value} sent to user={user.id}")
        return True

    @staticmethod
    def notify_safely(user_id: int, message: str, **kwargs) -> bool:
        """notify_user for callers whose own transaction must not depend on delivery."""
        try:
            return NotificationService.notify_user(user_id, message, **kwargs)
        except Exception as e:
            db.session.rollback()
            current_app.logger.warning(f"[notifications] delivery to user={user_id} failed: {e}")
            return False

    @staticmethod
    def list_for_user(user_id: int):
        return NotificationRepo.list_for_user(user_id)

    @staticmethod
    def send_return_reminders(now=None) -> int:
        now = now or utcnow()
        window = timedelta(hours=current_app.config["REMINDER_WINDOW_HOURS"])
        sent = 0

        for loan in LoanRepo.find_due_between(now, now + window):
            if NotificationRepo.already_sent(loan.id, NotificationType.RETURN_REMINDER.value):
                continue
            hours_left = math.ceil((loan.due_date - now).total_seconds() / 3600)
            title = loan.book.title if loan.book else f"Book #{loan.book_id}"
            message = (
                f"Reminder: '{title}' is due in {hours_left}h "
                f"(due at {loan.due_date:%Y-%m-%d %H:%M} UTC)."
            )
            if NotificationService.notify_safely(
                loan.user_id,
                message,
                notif_type=NotificationType.RETURN_REMINDER,
                title="Library: return date approaching",
                loan_id=loan.id,
            ):
                sent += 1
        return sent

    @staticmethod
    def send_overdue_notices(now=None) -> int:
        now = now or utcnow()
        sent = 0

        for loan in LoanRepo.find_overdue(now):
            if NotificationRepo.already_sent(loan.id, NotificationType.OVERDUE_NOTICE.value):
                continue
            days_late = max(1, (now - loan.due_date).days)
            title = loan.book.title if loan.book else f"Book #{loan.book_id}"
            message = (
                f"Overdue: '{title}' is {days_late} day(s) late. "
                f"Please return it as soon as possible."
            )
            if NotificationService.notify_safely(
                loan.user_id,
                message,
                notif_type=NotificationType.OVERDUE_NOTICE,
                title="Library: overdue loan",
                loan_id=loan.id,
            ):
                sent += 1
        return sent
