import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./autoshop.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Frontend origins allowed by CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# Appointment lifecycle switches
# When false, a COMPLETED appointment can no longer be cancelled
ALLOW_CANCEL_COMPLETED = os.getenv("ALLOW_CANCEL_COMPLETED", "true").lower() == "true"
# When true, an appointment cannot be marked COMPLETED without a final cost
REQUIRE_FINAL_COST_ON_COMPLETE = (
    os.getenv("REQUIRE_FINAL_COST_ON_COMPLETE", "true").lower() == "true"
)

# One-time code store (identity side)
OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "300"))
OTP_STORE_MAX_ENTRIES = int(os.getenv("OTP_STORE_MAX_ENTRIES", "10000"))
REDIS_URL = os.getenv("REDIS_URL")
