from flask_socketio import SocketIO

from unipay.events import PaymentEventEmitter
from unipay.providers import ProviderRegistry, registry

socketio = SocketIO()

# Process-wide publish point; create_app may be handed another one
event_emitter = PaymentEventEmitter()

providers: ProviderRegistry = registry
