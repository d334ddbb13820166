import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Older maintenance scripts read these instead of DATABASE_URL.
LEGACY_DATABASE_KEYS = ("MONGODB_URI", "MONGO_URI")


def _database_url():
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    for key in LEGACY_DATABASE_KEYS:
        url = os.getenv(key)
        if url:
            logger.warning(f"{key} is deprecated, set DATABASE_URL instead")
            return url
    return None


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    DATABASE_URL = _database_url()
    DATABASE_NAME = os.getenv("DATABASE_NAME", "ski_db")

    SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", 3))
    RESET_TOKEN_TTL_MINUTES = int(os.getenv("RESET_TOKEN_TTL_MINUTES", 60))
    # development only: return the reset token in the forgot-password response
    EXPOSE_RESET_TOKEN = _flag("EXPOSE_RESET_TOKEN")

    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    PORT = int(os.getenv("PORT", 8000))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
    CLIENT_STATE_PATH = os.getenv("CLIENT_STATE_PATH", os.path.expanduser("~/.ski_ms_client.json"))


def configure_logging(level=None):
    logging.basicConfig(
        level=(level or Config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
