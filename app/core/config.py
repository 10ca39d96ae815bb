import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# -----------------------
# Database Config
# -----------------------
DB_TYPE = os.getenv("DB_TYPE", "sqlite").lower()

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres setup")
elif DB_TYPE == "sqlite":
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./catalog.db")
else:
    raise ValueError(f"Unsupported DB_TYPE: {DB_TYPE}")

# Every store round-trip is bounded by this; exceeding it surfaces as 503
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

# -----------------------
# JWT Config (verification only, tokens are issued elsewhere)
# -----------------------
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    logger.warning("JWT_SECRET is not set, falling back to an insecure development secret")
    JWT_SECRET = "change-me"

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ADMIN_ROLES = [r.strip().lower() for r in os.getenv("ADMIN_ROLES", "admin").split(",") if r.strip()]

# -----------------------
# Catalog Config
# -----------------------
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))
PRICE_DECIMAL_PLACES = int(os.getenv("PRICE_DECIMAL_PLACES", "2"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
