from flask_socketio import emit, join_room, leave_room

from unipay.events import PaymentEvent, PaymentEventEmitter, PaymentEventType
from unipay.extensions import socketio
from unipay.utils.logger import get_logger

logger = get_logger(__name__)


def handle_connect(auth=None):
    """Handle client connection"""
    emit('connected', {'message': 'Connected to payment gateway'})


def handle_subscribe_transaction(data):
    """Subscribe to canonical events for one caller transaction"""
    transaction_id = (data or {}).get('transaction_id')
    if transaction_id:
        room = f'transaction_{transaction_id}'
        join_room(room)
        emit('subscribed', {
            'message': f'Subscribed to transaction {transaction_id}',
            'room': room
        })


def handle_unsubscribe_transaction(data):
    """Unsubscribe from transaction updates"""
    transaction_id = (data or {}).get('transaction_id')
    if transaction_id:
        room = f'transaction_{transaction_id}'
        leave_room(room)
        emit('unsubscribed', {
            'message': f'Unsubscribed from transaction {transaction_id}'
        })


def register_socket_handlers():
    """
    Attach the room handlers to the server socketio.init_app just built.

    Every init_app call creates a fresh server, so this runs once per app.
    """
    socketio.on_event('connect', handle_connect)
    socketio.on_event('subscribe_transaction', handle_subscribe_transaction)
    socketio.on_event('unsubscribe_transaction', handle_unsubscribe_transaction)


def emit_payment_event(sender, event: PaymentEvent):
    """
    Push a canonical payment event to clients subscribed to its transaction

    Args:
        sender: The emitter that published the event
        event: Canonical payment event
    """
    room = f'transaction_{event.transaction_id}'
    socketio.emit('payment_event', event.to_dict(), to=room)
    logger.info(f'{event.type.value} pushed to {room}')


def register_event_bridge(event_emitter: PaymentEventEmitter):
    """Subscribe the websocket fan-out to every canonical event type"""
    for event_type in PaymentEventType:
        event_emitter.on(event_type, emit_payment_event)
