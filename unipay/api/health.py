"""
Health Check Endpoints
"""

from flask import Blueprint, jsonify
from datetime import datetime, timezone

from unipay.providers import get_provider, list_available_providers
from unipay.providers.base import Capability

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check endpoint

    Returns:
        200 with the enabled providers and what each of them supports
    """
    providers = {}
    for name in list_available_providers():
        provider = get_provider(name)
        providers[name] = {
            'status': 'configured',
            'capabilities': sorted(c for c in Capability.ALL if provider.supports(c))
        }

    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'service': 'unipay',
        'version': '1.0.0',
        'providers': providers
    }), 200


@health_bp.route('/health/live', methods=['GET'])
def liveness_check():
    """
    Liveness probe

    Returns 200 while the process is able to serve requests
    """
    return jsonify({'status': 'alive'}), 200
