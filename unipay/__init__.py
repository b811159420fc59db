from flask import Flask
from flask_cors import CORS
from unipay.extensions import event_emitter as default_event_emitter, providers, socketio
from unipay.config import config
from unipay.utils.logger import RequestLogger, configure_app_logging


def create_app(config_name='development', event_emitter=None):
    """Application factory pattern"""
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    emitter = event_emitter or default_event_emitter
    app.extensions['unipay_events'] = emitter

    # Initialize extensions
    socketio.init_app(app, cors_allowed_origins="*")
    CORS(app)
    providers.init_app(app, emitter)
    configure_app_logging(app)
    RequestLogger(app)

    # Room handlers, and forwarding of canonical events to subscribers
    from unipay.websockets.events import register_event_bridge, register_socket_handlers
    register_socket_handlers()
    register_event_bridge(emitter)

    # Register blueprints
    from unipay.api import register_blueprints
    register_blueprints(app)

    # Error handlers
    register_error_handlers(app)

    return app


def register_error_handlers(app):
    """Register error handlers"""
    from flask import jsonify
    from unipay.errors import AppError, PaymentError

    @app.errorhandler(AppError)
    def app_error(error):
        body = {'success': False, 'error': error.error, 'message': error.message}
        if isinstance(error, PaymentError):
            body['type'] = error.error_type.value
        return jsonify(body), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'error': 'Bad request', 'message': str(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found', 'message': str(error)}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'Internal server error', 'message': str(error)}), 500
