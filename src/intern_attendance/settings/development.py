import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "intern_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "mysql" or "memory" (process-local, lost on restart)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")
# "direct" or "approval"; one workflow is the system of record per deployment
ATTENDANCE_WORKFLOW = os.getenv("ATTENDANCE_WORKFLOW", "direct")
MISSED_DAYS_WINDOW = int(os.getenv("MISSED_DAYS_WINDOW", "30"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo profiles on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
