#!/usr/bin/env python3
"""
Application entry point.

Run the Flask development server.
For production, use gunicorn or another WSGI server.
"""
import sys

# Load environment variables
from dotenv import load_dotenv
load_dotenv()

from attribution_tracker import create_app
from attribution_tracker.config import settings


def main():
    """Main entry point."""
    app = create_app()

    host = settings.host
    port = settings.port

    print(f"""
╔════════════════════════════════════════════════════════════════╗
║                 Attribution Tracking Server                    ║
╚════════════════════════════════════════════════════════════════╝

Environment: {settings.flask_env}
Debug: {settings.debug}
Host: {host}
Port: {port}

API endpoints:
  • POST http://{host}:{port}/api/track-conversion
  • GET  http://{host}:{port}/api/conversions/by-campaign
  • GET  http://{host}:{port}/api/order/<orderId>
  • GET  http://{host}:{port}/health

Press CTRL+C to stop the server
    """)

    try:
        app.run(
            host=host,
            port=port,
            debug=settings.debug
        )
    except KeyboardInterrupt:
        print("\n\nServer stopped.")
        sys.exit(0)


if __name__ == '__main__':
    main()
