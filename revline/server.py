import logging
import os
from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.errors import RateLimitExceeded
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from revline.api.document import document_bp
from revline.config import get_config
from revline.services.document_pdf.utils.asset_path import Asset
from revline.utils.request_logger import RequestLogger

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(app):
    os.makedirs(app.config['LOGS_DIR'], exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(os.path.join(app.config['LOGS_DIR'], 'app.log')),
            logging.StreamHandler()
        ]
    )


def check_document_assets(app):
    """Return the configured image assets that are missing from ASSET_FOLDER."""
    missing = []
    for key in ('WATERMARK_IMAGE', 'LOGO_IMAGE'):
        name = app.config.get(key)
        if name and Asset.safe_asset_path(name, app.config['ASSET_FOLDER']) is None:
            logger.warning(f"{key} '{name}' not found in {app.config['ASSET_FOLDER']}, documents will render without it")
            missing.append(key)
    return missing


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or get_config())
    configure_logging(app)
    check_document_assets(app)

    # default limits come from RATELIMIT_DEFAULT
    Limiter(key_func=get_remote_address, app=app)
    CORS(app, supports_credentials=True, resources={r"/api/*": {"origins": app.config.get('CORS_ORIGINS', [])}})

    app.before_request(RequestLogger.before_request)
    app.after_request(RequestLogger.after_request)

    app.register_blueprint(document_bp, url_prefix='/api')

    @app.route('/')
    def root():
        return {'status': 'ok', 'message': 'Revline document service is running. Available endpoints: /api/*'}

    @app.route('/api/health-check')
    def health_check():
        return {'status': 'ok', 'message': 'Document service is running.'}

    @app.errorhandler(404)
    def not_found(error):
        logger.error(f"404 error for path: {request.path}")
        if request.path.startswith('/api/'):
            return jsonify({'error': 'API endpoint not found', 'path': request.path}), 404
        return jsonify({'error': 'Page not found', 'path': request.path}), 404

    @app.errorhandler(400)
    def bad_request(error):
        logger.error(f"400 Bad Request for {request.method} {request.url}: {error}")
        return jsonify({'error': 'Bad Request', 'message': str(error), 'path': request.path}), 400

    @app.errorhandler(RateLimitExceeded)
    def ratelimit_handler(e):
        return jsonify({'error': 'Too many requests', 'message': str(e.description)}), 429

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({'error': e.name, 'message': e.description}), e.code
        logger.error(f"Unhandled exception for {request.method} {request.url}: {e}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500

    logger.info(f"Document service configured, order API at {app.config['ORDER_API_URL']}")
    return app


app = create_app()


if __name__ == '__main__':
    app.run(host=app.config.get('FLASK_HOST', '0.0.0.0'), port=app.config.get('FLASK_PORT', 5000))
