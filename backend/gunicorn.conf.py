import os

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8080")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = int(os.getenv("GUNICORN_THREADS", "1"))
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by the container runtime)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Trust proxy headers
forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "*")
proxy_protocol = False

# TLS termination in-process when certificates are configured
if os.getenv("TLS_ENABLE", "false").lower() in {"1", "true", "yes", "on"}:
    certfile = os.getenv("TLS_CERT_PATH")
    keyfile = os.getenv("TLS_KEY_PATH")

wsgi_app = "algoshield:create_app()"
