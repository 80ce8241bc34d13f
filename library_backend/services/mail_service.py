from __future__ import annotations

from flask import current_app
from flask_mail import Message

from library_backend.extensions import db, mail
from library_backend.models.notification_log import NotificationLog
from library_backend.utils.timeutil import utcnow


class MailService:
    @staticmethod
    def send_email(to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            msg = Message(subject=subject, recipients=[to_email], body=body)
            mail.send(msg)
            return True, None
        except Exception as e:
            current_app.logger.warning(f"[MailService] Mail could not be sent to {to_email}: {e}")
            return False, str(e)

    @staticmethod
    def log_notification(
        user_id: int | None,
        notif_type: str,
        to_email: str | None,
        message: str,
        success: bool,
        error: str | None = None,
        loan_id: int | None = None,
        commit: bool = False,  # no commit inside loops
    ) -> NotificationLog:
        row = NotificationLog(
            user_id=user_id,
            loan_id=loan_id,
            type=notif_type,
            email=to_email,
            message=message,
            success=bool(success),
            error_message=error,
            sent_at=utcnow(),
        )
        db.session.add(row)
        if commit:
            db.session.commit()
        return row

    @staticmethod
    def send_and_log(user, subject: str, body: str, notif_type: str, loan_id: int | None = None) -> bool:
        """
        Mails the user and records the attempt. commit=False: the caller commits once.
        """
        to_email = getattr(user, "email", None)
        user_id = getattr(user, "id", None)

        if not to_email:
            MailService.log_notification(
                user_id=user_id,
                notif_type=notif_type,
                to_email=None,
                message=body,
                success=False,
                error="missing_email",
                loan_id=loan_id,
            )
            return False

        ok, err = MailService.send_email(to_email, subject, body)

        MailService.log_notification(
            user_id=user_id,
            notif_type=notif_type,
            to_email=to_email,
            message=body,
            success=ok,
            error=err,
            loan_id=loan_id,
        )
        return ok
