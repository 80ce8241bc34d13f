from library_backend.models.activity_log import ActivityLog
from library_backend.repositories.activity_log_repo import ActivityLogRepo
from library_backend.utils.timeutil import utcnow


class ActivityLogService:
    @staticmethod
    def log(user_id: int, action: str, details: str = None) -> ActivityLog:
        return ActivityLogRepo.add(
            ActivityLog(user_id=user_id, action=action, details=details, timestamp=utcnow())
        )

    @staticmethod
    def get_by_user(user_id: int):
        return ActivityLogRepo.list_by_user(user_id)
