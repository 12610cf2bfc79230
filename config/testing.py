import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "training_attendance_test"),
}

FACE_API_URL = "http://face-api.test"
FACE_API_TIMEOUT = 5.0

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads-test")
UPLOAD_BASE_URL = "http://testserver/uploads"

LATE_COUNTS_AS_PRESENT = False

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
