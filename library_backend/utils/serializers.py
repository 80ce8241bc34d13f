def _iso(value):
    return value.isoformat() if value is not None else None


def book_to_dict(b):
    stock = b.stock
    return {
        "id": b.id,
        "title": b.title,
        "author": b.author,
        "isbn": b.isbn,
        "quantity": stock.quantity if stock else None,
        "isAvailable": bool(stock and stock.is_available),
    }


def stock_to_dict(s):
    return {
        "id": s.id,
        "bookId": s.book_id,
        "quantity": s.quantity,
        "isAvailable": bool(s.is_available),
    }


def loan_to_dict(x):
    return {
        "id": x.id,
        "userId": x.user_id,
        "bookId": x.book_id,
        "bookTitle": x.book.title if x.book else None,
        "loanDate": _iso(x.loan_date),
        "dueDate": _iso(x.due_date),
        "returnDate": _iso(x.return_date),
        "fine": float(x.fine or 0),
        "status": x.status.value,
    }


def reservation_to_dict(r):
    return {
        "id": r.id,
        "userId": r.user_id,
        "userName": r.user.username if r.user else None,
        "bookId": r.book_id,
        "bookTitle": r.book.title if r.book else None,
        "reservationDate": _iso(r.reservation_date),
        "createdAt": _iso(r.created_at),
        "status": r.status.value,
        "availableAt": _iso(r.available_at),
        "expirationDate": _iso(r.expiration_date),
        "assignedStockId": r.assigned_stock_id,
    }


def history_to_dict(h):
    return {
        "id": h.id,
        "eventType": h.event_type,
        "eventDate": _iso(h.event_date),
        "loanId": h.loan_id,
        "reservationId": h.reservation_id,
    }


def activity_to_dict(a):
    return {
        "id": a.id,
        "userId": a.user_id,
        "action": a.action,
        "details": a.details,
        "timestamp": _iso(a.timestamp),
    }


def notification_to_dict(n):
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "timestamp": _iso(n.timestamp),
        "isRead": bool(n.is_read),
    }
