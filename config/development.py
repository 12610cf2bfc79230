import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "training_attendance"),
}

# Face comparison API (POST /api/compare-faces)
FACE_API_URL = os.getenv("FACE_API_URL", "http://localhost:8000")
FACE_API_TIMEOUT = float(os.getenv("FACE_API_TIMEOUT", "20"))

# Check-in/out captures are written here and served from UPLOAD_BASE_URL.
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
UPLOAD_BASE_URL = os.getenv("UPLOAD_BASE_URL", "http://localhost:5000/uploads")

# Attendance matrix: count LATE days as present
LATE_COUNTS_AS_PRESENT = bool(int(os.getenv("LATE_COUNTS_AS_PRESENT", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
