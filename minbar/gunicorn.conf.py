import multiprocessing
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
wsgi_app = "minbar.wsgi:app"
workers = int(
    os.environ.get("GUNICORN_WORKERS", str(multiprocessing.cpu_count() * 2 + 1))
)
threads = int(os.environ.get("GUNICORN_THREADS", "2"))
# Reset emails go out inside the request; keep this above SMTP_TIMEOUT_SECONDS.
timeout = max(
    int(os.environ.get("GUNICORN_TIMEOUT", "30")),
    int(float(os.environ.get("SMTP_TIMEOUT_SECONDS", "15"))) + 5,
)
worker_class = os.environ.get("GUNICORN_WORKER_CLASS", "gthread")
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("GUNICORN_LOGLEVEL", "info")
proc_name = os.environ.get("GUNICORN_PROC_NAME", "minbar")
