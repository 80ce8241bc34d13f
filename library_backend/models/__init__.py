from library_backend.models.user import User, UserRoles
from library_backend.models.book import Book
from library_backend.models.stock import Stock
from library_backend.models.loan import Loan, LoanStatus
from library_backend.models.reservation import Reservation, ReservationStatus
from library_backend.models.history import History
from library_backend.models.activity_log import ActivityLog
from library_backend.models.notification import Notification, NotificationType
from library_backend.models.notification_log import NotificationLog

__all__ = [
    "User",
    "UserRoles",
    "Book",
    "Stock",
    "Loan",
    "LoanStatus",
    "Reservation",
    "ReservationStatus",
    "History",
    "ActivityLog",
    "Notification",
    "NotificationType",
    "NotificationLog",
]
