from flask import Flask, jsonify

from library_backend.config import Config
from library_backend.extensions import db, jwt, mail, migrate


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # 1) db first: everything below needs db.engine / db.session
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)

    # 2) tables (migrations take over in real deployments)
    from library_backend import models  # noqa: F401  registers the tables
    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    # 3) API blueprints
    from library_backend.cli import cli_bp
    from library_backend.controllers.auth_controller import auth_bp
    from library_backend.controllers.book_controller import book_bp
    from library_backend.controllers.history_controller import audit_bp, history_bp
    from library_backend.controllers.loan_controller import loan_bp
    from library_backend.controllers.notification_controller import notif_bp
    from library_backend.controllers.reservation_controller import reservation_bp
    from library_backend.controllers.stock_controller import stock_bp
    app.register_blueprint(auth_bp, url_prefix="/api/Auths")
    app.register_blueprint(book_bp, url_prefix="/api/Books")
    app.register_blueprint(stock_bp, url_prefix="/api/Stocks")
    app.register_blueprint(loan_bp, url_prefix="/api/Loans")
    app.register_blueprint(reservation_bp, url_prefix="/api/Reservations")
    app.register_blueprint(history_bp, url_prefix="/api/Histories")
    app.register_blueprint(audit_bp, url_prefix="/api/Audits")
    app.register_blueprint(notif_bp, url_prefix="/api/Notifications")
    app.register_blueprint(cli_bp)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    # 4) periodic jobs (reminders, reservation expiry)
    from library_backend.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
