import os
from dotenv import load_dotenv

load_dotenv()


def _default_storage_backend() -> str:
    if os.getenv("UPLOADTHING_TOKEN") or os.getenv("UPLOADTHING_SECRET"):
        return "uploadthing"
    if os.getenv("CLOUDINARY_URL"):
        return "cloudinary"
    return "local"


class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "Hotel Suites")
    # Core settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")

    # Auth & Session
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "hotel_admin_session")
    SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "7"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./hotel_cms.db")

    # Default admin bootstrap
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@hotel.local")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin12345")

    # File storage: "uploadthing", "cloudinary" or "local"
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", _default_storage_backend()).lower()
    UPLOADTHING_TOKEN: str = os.getenv("UPLOADTHING_TOKEN", "")
    UPLOADTHING_SECRET: str = os.getenv("UPLOADTHING_SECRET", "")
    UPLOADTHING_API_URL: str = os.getenv("UPLOADTHING_API_URL", "https://api.uploadthing.com")
    UPLOADTHING_TIMEOUT: int = int(os.getenv("UPLOADTHING_TIMEOUT", "60"))
    CLOUDINARY_URL: str = os.getenv("CLOUDINARY_URL", "")
    CLOUDINARY_FOLDER: str = os.getenv("CLOUDINARY_FOLDER", "hotel")
    LOCAL_UPLOAD_DIR: str = os.getenv(
        "LOCAL_UPLOAD_DIR", os.path.join(os.path.dirname(__file__), "static", "uploads")
    )

    # Upload constraints
    UPLOAD_IMAGE_MAX_MB: int = int(os.getenv("UPLOAD_IMAGE_MAX_MB", "4"))
    UPLOAD_IMAGE_MAX_BYTES: int = UPLOAD_IMAGE_MAX_MB * 1024 * 1024
    UPLOAD_VIDEO_MAX_MB: int = int(os.getenv("UPLOAD_VIDEO_MAX_MB", "64"))
    UPLOAD_VIDEO_MAX_BYTES: int = UPLOAD_VIDEO_MAX_MB * 1024 * 1024

    # Pricing
    MAX_PRICE_TIERS: int = int(os.getenv("MAX_PRICE_TIERS", "4"))
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "₹")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
    RATE_LIMIT_AUTH: str = os.getenv("RATE_LIMIT_AUTH", "5/minute")


settings = Settings()
