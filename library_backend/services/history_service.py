from library_backend.models.history import History
from library_backend.repositories.history_repo import HistoryRepo
from library_backend.utils.timeutil import utcnow


class HistoryService:
    @staticmethod
    def log_event(user_id: int, event_type: str, loan_id: int = None, reservation_id: int = None) -> History:
        if not event_type or not event_type.strip():
            raise ValueError("Event type must be provided.")

        entry = History(
            user_id=user_id,
            event_type=event_type,
            loan_id=loan_id,
            reservation_id=reservation_id,
            event_date=utcnow(),
        )
        return HistoryRepo.add(entry)

    @staticmethod
    def get_history_for_user(user_id: int, page: int = 1, page_size: int = 20):
        if page < 1:
            raise ValueError("Page must be at least 1.")
        if page_size < 1:
            raise ValueError("Page size must be at least 1.")
        return HistoryRepo.page_for_user(user_id, page, page_size)
