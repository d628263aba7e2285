import logging

from flask import Flask
from config import Config
from routes import health_bp, auth_bp, admin_bp, booking_bp

from models import db
from utils.auth_context import load_current_user
from utils.errors import register_error_handlers
from security.csrf import csrf_protect


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)
    logging.getLogger("audit").setLevel(level)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(booking_bp)

    register_error_handlers(app)

    # JSON document store
    db.init_app(app)

    @app.before_request
    def _load_user():
        load_current_user()

    app.before_request(csrf_protect)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
import click
from models.data_service import get_data, set_user_role
from models.user import Role
from utils.errors import NotFoundError


def register_cli(app):
    @app.cli.command("init-store")
    def init_store():
        """Create the data file with default courts, slots, rates and admin."""
        snapshot = get_data()
        click.echo(
            f"Store ready at {db.path}: {len(snapshot.courts)} courts, "
            f"{len(snapshot.time_slots)} time slots, {len(snapshot.users)} users"
        )

    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a user to admin by email (bootstrap)."""
        try:
            user = set_user_role(email, Role.ADMIN)
        except NotFoundError:
            click.echo("User not found")
            return
        click.echo(f"{user.email} promoted to admin")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
