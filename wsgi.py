import os
from unipay import create_app, socketio
from unipay.extensions import providers

app = create_app(os.getenv('FLASK_ENV', 'development'))

@app.shell_context_processor
def make_shell_context():
    from unipay.events import PaymentEventType
    return {
        'providers': providers,
        'event_emitter': app.extensions['unipay_events'],
        'PaymentEventType': PaymentEventType
    }

if __name__ == '__main__':
    socketio.run(app, debug=True, host='0.0.0.0', port=int(os.getenv('PORT', 5000)))
