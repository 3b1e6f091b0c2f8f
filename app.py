"""Hugging Face Spaces entry point."""

from crowd_safety.config import settings, configure_logging
from crowd_safety.visualization.dash_app import app

server = app.server  # expose Flask server for gunicorn fallback

if __name__ == "__main__":
    configure_logging()
    app.run(host=settings.HOST, debug=settings.DEBUG, port=settings.PORT)
