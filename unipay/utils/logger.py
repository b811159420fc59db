"""
Logging Configuration
Centralized logging setup for the payment gateway
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
import os
import time

from flask import g, request

LOG_DIR = os.getenv('UNIPAY_LOG_DIR', 'logs')
LOG_LEVEL = os.getenv('UNIPAY_LOG_LEVEL', 'INFO').upper()


def _ensure_log_dir() -> bool:
    if not os.path.exists(LOG_DIR):
        try:
            os.makedirs(LOG_DIR)
        except OSError:
            return False
    return True


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        logger.setLevel(LOG_LEVEL)

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(LOG_LEVEL)

        # File handler (if logs directory exists)
        if _ensure_log_dir():
            file_handler = RotatingFileHandler(
                os.path.join(LOG_DIR, 'unipay.log'),
                maxBytes=10485760,  # 10MB
                backupCount=10
            )
            file_handler.setLevel(logging.INFO)

            # File formatter
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

        # Console formatter
        console_formatter = logging.Formatter(
            '%(levelname)s - %(name)s - %(message)s'
        )
        console_handler.setFormatter(console_formatter)

        logger.addHandler(console_handler)

    return logger


def configure_app_logging(app):
    """
    Configure logging for the Flask application

    Provider and webhook modules log through ``logging.getLogger(__name__)``
    under the ``unipay`` namespace; their records go to the error log and,
    in debug mode, to the console.

    Args:
        app: Flask application instance
    """
    # Set Flask logger level
    app.logger.setLevel(logging.INFO)

    package_logger = logging.getLogger('unipay')
    package_logger.setLevel(logging.DEBUG if app.debug else logging.INFO)

    if app.testing or not _ensure_log_dir():
        return

    # Error log
    error_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, 'error.log'),
        maxBytes=10485760,
        backupCount=10
    )
    error_handler.setLevel(logging.WARNING)
    error_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s\n%(pathname)s:%(lineno)d',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    error_handler.setFormatter(error_formatter)

    app.logger.addHandler(error_handler)
    package_logger.addHandler(error_handler)


class RequestLogger:
    """
    Middleware logging one line per request with status and duration

    Liveness probes are skipped. Request bodies and headers are never
    logged; webhook bodies carry signed payloads.
    """

    QUIET_PATHS = ('/api/v1/health/live',)

    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialize request logging"""
        logger = get_logger('unipay.request')

        @app.before_request
        def start_timer():
            g.request_started_at = time.perf_counter()

        @app.after_request
        def log_response(response):
            if request.path in self.QUIET_PATHS:
                return response

            started = g.get('request_started_at')
            elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
            logger.info(
                f'{request.method} {request.path} - '
                f'Status: {response.status_code} - '
                f'{elapsed_ms:.1f}ms - '
                f'IP: {request.remote_addr}'
            )
            return response
