import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL")
API_PREFIX = os.getenv("API_PREFIX", "/api")
STRICT_NOT_FOUND = _flag("STRICT_NOT_FOUND", True)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DB_WAIT_ATTEMPTS = int(os.getenv("DB_WAIT_ATTEMPTS", "10"))
