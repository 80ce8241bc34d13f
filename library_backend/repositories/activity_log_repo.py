from library_backend.extensions import db
from library_backend.models.activity_log import ActivityLog


class ActivityLogRepo:
    @staticmethod
    def add(entry: ActivityLog):
        db.session.add(entry)
        db.session.commit()
        return entry

    @staticmethod
    def list_by_user(user_id: int):
        return (
            ActivityLog.query
            .filter_by(user_id=user_id)
            .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
            .all()
        )
