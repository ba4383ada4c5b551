"""Gunicorn configuration file.

Secrets are read by kada_connect.config.settings from /run/secrets (Docker
secrets) or the environment when each worker imports the app; this file only
sets the server shape and logs which source will be used.
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '3001')}"
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))

# Log to stdout/stderr for the container runtime
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

wsgi_app = "kada_connect.flask_app:app"


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Reports whether the admin key will come from /run/secrets or the environment.
    """
    from pathlib import Path

    secret_file = Path("/run/secrets/admin_api_key")
    if secret_file.is_file():
        worker.log.info("Using ADMIN_API_KEY from /run/secrets")
        return

    if os.environ.get("ADMIN_API_KEY"):
        worker.log.info("Using ADMIN_API_KEY from environment")
        return

    if os.environ.get("APP_ENV", "development").lower() == "production":
        worker.log.error("ADMIN_API_KEY missing in production; worker will fail to load the app")
    else:
        worker.log.warning("ADMIN_API_KEY not set; a temporary development key will be generated")
