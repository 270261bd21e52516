"""Application settings read from the environment (and a local .env file)."""
import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes", "on")


# MongoDB
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE = os.getenv("MONGODB_DATABASE", "em_diary")
MONGODB_USERS_COLLECTION = os.getenv("MONGODB_USERS_COLLECTION", "users")
MONGODB_NOTES_COLLECTION = os.getenv("MONGODB_NOTES_COLLECTION", "oneOnOneNotes")
MONGODB_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

# Sessions
SECRET_KEY = os.getenv("SECRET_KEY", "your-super-secret-key-change-in-production-min-32-chars")
SESSION_EXPIRE_MINUTES = int(os.getenv("SESSION_EXPIRE_MINUTES", "480"))
MANAGER_EMAIL = os.getenv("MANAGER_EMAIL", "").strip().lower()
MANAGER_PASSWORD_HASH = os.getenv("MANAGER_PASSWORD_HASH", "")

# Skips sign-in entirely; every request acts as the demo manager
DEMO_MODE = _env_bool("DEMO_MODE")

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "America/Chicago")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
