"""
Gunicorn config: bind to 0.0.0.0 and PORT for Railway/Render, logs to stdout.
Workers share nothing but APP_SECRET, so any worker can verify any token.
"""
import os

bind = "0.0.0.0:{}".format(os.environ.get("PORT", "8080"))
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))
threads = 2
timeout = 60
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
