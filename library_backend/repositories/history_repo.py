from library_backend.extensions import db
from library_backend.models.history import History


class HistoryRepo:
    @staticmethod
    def add(entry: History):
        db.session.add(entry)
        db.session.commit()
        return entry

    @staticmethod
    def page_for_user(user_id: int, page: int, page_size: int):
        return (
            History.query
            .filter_by(user_id=user_id)
            .order_by(History.event_date.desc(), History.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
