import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "training_attendance"),
}

FACE_API_URL = os.getenv("FACE_API_URL", "http://face-api:8000")
FACE_API_TIMEOUT = float(os.getenv("FACE_API_TIMEOUT", "20"))

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "/var/lib/training-attendance/uploads")
UPLOAD_BASE_URL = os.getenv("UPLOAD_BASE_URL", "https://cdn.training-attendance.invalid/uploads")

LATE_COUNTS_AS_PRESENT = bool(int(os.getenv("LATE_COUNTS_AS_PRESENT", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
