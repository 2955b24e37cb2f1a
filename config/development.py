import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "weekend_courses"),
    "lock_wait_timeout": int(os.getenv("DB_LOCK_WAIT_TIMEOUT", "10")),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Scan window around each session, in minutes
EARLY_ENTRY_MINUTES = int(os.getenv("EARLY_ENTRY_MINUTES", "15"))
LATE_ENTRY_MINUTES = int(os.getenv("LATE_ENTRY_MINUTES", "30"))
MAX_REASSIGNMENT_REQUESTS = int(os.getenv("MAX_REASSIGNMENT_REQUESTS", "3"))

# Leave MAIL_SERVER empty to only log outgoing mail
MAIL_SERVER = os.getenv("MAIL_SERVER", "")
MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "")
MAIL_USE_TLS = bool(int(os.getenv("MAIL_USE_TLS", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "")
