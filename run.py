"""
Entry point for the Zoom Automator control API.
Starts the FastAPI application on the loopback interface.
"""

import sys
import os
import uvicorn

# Add the current directory to sys.path
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.insert(0, current_dir)

# Import settings
from app.config import settings


def run():
    """Run the Zoom Automator API server."""
    host = settings.server.host
    port = settings.server.port

    print("\n" + "=" * 60)
    print("ZOOM AUTOMATOR - Presence Control Server")
    print("=" * 60)
    print(f"🚀 Starting FastAPI application...")
    print(f"📍 Host: {host}:{port}")
    print(f"📁 Profile: {os.path.expanduser(settings.automator.data_dir)}")
    print(f"🔐 First run: curl -X POST http://{host}:{port}/auth/login")
    print("=" * 60 + "\n")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        timeout_keep_alive=settings.server.idle_timeout_seconds,
    )


if __name__ == "__main__":
    try:
        run()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        sys.exit(1)
