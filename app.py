import logging
import os
import sqlite3

from flask import Flask, render_template, send_from_directory
from flask_login import LoginManager, current_user
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import get_config
from models import db, User
from routes import register_blueprints
from services import float_to_fraction, get_unread_count
from services.parsing import RANGE_SPLIT

logger = logging.getLogger(__name__)

login_manager = LoginManager()
login_manager.login_view = 'auth.login'
login_manager.login_message_category = 'warning'

migrate = Migrate()


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    # Enable SQLite foreign key enforcement
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def display_amount(amount):
    """Jinja filter: '0.5' -> '1/2', '1.5' -> '1 1/2', ranges part by part."""
    if not amount:
        return ''
    parts = []
    for part in RANGE_SPLIT.split(str(amount)):
        try:
            parts.append(float_to_fraction(float(part)))
        except ValueError:
            return amount
    return '-'.join(parts)


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    logging.getLogger().setLevel(level)


def create_app(env=None):
    app = Flask(__name__)
    app.config.from_object(get_config(env))

    configure_logging(app)
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    register_blueprints(app)
    app.add_template_filter(display_amount, 'fraction')

    @app.context_processor
    def inject_notification_count():
        if current_user.is_authenticated:
            return {'unread_count': get_unread_count(current_user.id)}
        return {'unread_count': 0}

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    @app.errorhandler(403)
    def forbidden(error):
        return render_template('error.html', code=403,
                               message="You don't have permission to view this page."), 403

    @app.errorhandler(404)
    def not_found(error):
        return render_template('error.html', code=404, message='Page not found.'), 404

    @app.errorhandler(413)
    def too_large(error):
        return render_template('error.html', code=413, message='Upload is too large.'), 413

    logger.debug("App created with %s", app.config.get('SQLALCHEMY_DATABASE_URI'))
    return app


# ============================================
# INITIALIZE DATABASE
# ============================================

def init_db(app):
    """Create any missing tables (local runs; deployments use flask db upgrade)."""
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    app = create_app()
    init_db(app)
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, use_reloader=False)
