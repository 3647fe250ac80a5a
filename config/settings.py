import os
from dotenv import load_dotenv

# Load environment variables from the project root
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", ".env"))

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    pg_host = os.getenv("PGHOST")
    pg_port = os.getenv("PGPORT", "5432")
    pg_db = os.getenv("PGDATABASE")
    pg_user = os.getenv("PGUSER")
    pg_password = os.getenv("PGPASSWORD")

    if all([pg_host, pg_db, pg_user, pg_password]):
        DATABASE_URL = (
            f"postgresql+asyncpg://{pg_user}:{pg_password}@{pg_host}:{pg_port}/{pg_db}"
        )

if DATABASE_URL is None:
    raise ValueError(
        "DATABASE_URL is not configured. Set DATABASE_URL explicitly or provide "
        "PGHOST/PGPORT/PGDATABASE/PGUSER/PGPASSWORD environment variables."
    )


def _bool_env(name: str, default: str = "1") -> bool:
    value = os.getenv(name, default).strip().lower()
    return value not in {"0", "false", "no"}


def _csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "prod").lower()
IS_DEV_MODE = APP_ENV in {"dev", "development"}
DATABASE_ECHO = _bool_env("DATABASE_ECHO", "false")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "8000"))
CORS_ALLOW_ORIGINS = _csv_env("CORS_ALLOW_ORIGINS", "*")

# Token signing
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    if not IS_DEV_MODE:
        raise ValueError("JWT_SECRET is not configured. Set it in your .env file.")
    JWT_SECRET = "dev-only-insecure-secret"
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_IN_HOURS = int(os.getenv("JWT_EXPIRES_IN_HOURS", "24"))

# Hosted image storage
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "catalog-products")
CLOUDINARY_API_BASE_URL = os.getenv("CLOUDINARY_API_BASE_URL", "https://api.cloudinary.com/v1_1")
CLOUDINARY_DELIVERY_HOST = os.getenv("CLOUDINARY_DELIVERY_HOST", "res.cloudinary.com")
CLOUDINARY_UPLOAD_TIMEOUT = float(os.getenv("CLOUDINARY_UPLOAD_TIMEOUT", "30"))
# Bounded dimensions, then adaptive quality and format.
CLOUDINARY_TRANSFORMATION = "c_limit,w_800,h_600/q_auto/f_auto"

# Catalog rules
MAX_IMAGES_PER_PRODUCT = int(os.getenv("MAX_IMAGES_PER_PRODUCT", "5"))
MAX_IMAGE_SIZE_BYTES = int(os.getenv("MAX_IMAGE_SIZE_BYTES", str(10 * 1024 * 1024)))
ALLOWED_IMAGE_MIME_TYPES = frozenset(
    _csv_env("ALLOWED_IMAGE_MIME_TYPES", "image/jpeg,image/png,image/webp,image/gif")
)
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))
