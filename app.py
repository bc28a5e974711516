import logging

from flask import Flask
from werkzeug.exceptions import RequestEntityTooLarge

import config
from inference_client import build_gateway
from sentiscope.extensions import db, migrate

# Blueprint imports
from sentiscope.sentiment.handlers import body_too_large, sentiment_bp
from sentiscope.history.handlers import history_bp

logger = logging.getLogger(__name__)


def create_app(overrides=None, http_session=None):
    """
    Build the Flask app. `overrides` replaces config values (tests point the
    database at in-memory SQLite this way); `http_session` replaces the
    requests.Session used for the hosted models.
    """
    config.configure_logging()

    app = Flask(__name__)

    # Configuration
    app.config['SQLALCHEMY_DATABASE_URI'] = config.SQLALCHEMY_DATABASE_URI
    app.config['SECRET_KEY'] = config.SECRET_KEY
    app.config['HUGGING_FACE_API_KEY'] = config.HUGGING_FACE_API_KEY
    app.config['PRIMARY_MODEL_URL'] = config.PRIMARY_MODEL_URL
    app.config['FALLBACK_MODEL_URL'] = config.FALLBACK_MODEL_URL
    app.config['INFERENCE_TIMEOUT'] = config.INFERENCE_TIMEOUT
    app.config['RETRY_MAX_ATTEMPTS'] = config.RETRY_MAX_ATTEMPTS
    app.config['RETRY_BASE_DELAY'] = config.RETRY_BASE_DELAY
    app.config['MAX_TEXT_LENGTH'] = config.MAX_TEXT_LENGTH
    app.config['HISTORY_DEFAULT_LIMIT'] = config.HISTORY_DEFAULT_LIMIT
    app.config['MAX_CONTENT_LENGTH'] = 64 * 1024
    if overrides:
        app.config.update(overrides)

    # Database setup
    db.init_app(app)
    migrate.init_app(app, db)
    with app.app_context():
        db.create_all()

    # Inference gateway, shared by every request
    app.extensions['inference_gateway'] = build_gateway(app.config, session=http_session)

    # Blueprint registration
    app.register_blueprint(sentiment_bp)
    app.register_blueprint(history_bp)

    # Oversized bodies get the same JSON 400 as over-long text
    app.register_error_handler(RequestEntityTooLarge, body_too_large)

    @app.route('/health')
    def health():
        return "OK"

    if not app.config['HUGGING_FACE_API_KEY']:
        logger.warning("HUGGING_FACE_API_KEY is not set; /analyze will answer 500")

    return app


app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000, debug=True)
