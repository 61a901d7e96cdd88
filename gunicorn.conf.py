# gunicorn.conf.py
import os

wsgi_app = "basic_comet.wsgi:application"

# Workers
# Realtime inbox and typing presence live in the locmem cache, which is per
# process. Scale with threads, not workers.
workers = int(os.getenv("GUNICORN_WORKERS", 1))
threads = int(os.getenv("GUNICORN_THREADS", 4))
worker_class = "gthread"
timeout = int(os.getenv("GUNICORN_TIMEOUT", 90))
graceful_timeout = 30
keepalive = 5
max_requests = 2000
max_requests_jitter = 100

# Uploads (voice notes, attachments) are spooled to disk
worker_tmp_dir = os.getenv("GUNICORN_TMP_DIR", "/dev/shm")

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(L)ss "%(a)s"'

proc_name = "basic-comet"

bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"

# Behind the platform proxy
forwarded_allow_ips = "*"
