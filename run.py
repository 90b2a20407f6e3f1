import atexit
from sse_relay import create_app
from sse_relay.config import ConfigManager
from sse_relay.services.event_service import get_event_service

ENDPOINTS = [
    ("GET /events", "SSE endpoint"),
    ("GET /broadcast/:message", "Broadcast message to all clients"),
    ("GET /send-event/:eventType/:message", "Send custom event"),
    ("GET /status", "Server status"),
]


def main():
    config = ConfigManager()
    app = create_app(config, start_background=True)

    def cleanup():
        with app.app_context():
            get_event_service().shutdown()

    atexit.register(cleanup)

    host = config.server.host
    port = config.server.port

    print(f"SSE Server running on http://{host}:{port}")
    print("Available endpoints:")
    for route, description in ENDPOINTS:
        print(f"  {route} - {description}")

    # Each open stream holds a worker thread
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
