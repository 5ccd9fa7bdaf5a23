"""Configuration loader for Competition Manager with environment-specific support"""

import os
from pathlib import Path

from dotenv import load_dotenv

server_dir = Path(__file__).parent.parent.parent
env_path = server_dir / ".env"

# Load .env file if it exists. For local development only.
if env_path.exists():
    load_dotenv(env_path)

# Configuration dictionary - set once at initialization
config = {
    "database_url": os.getenv("DATABASE_URL"),
    "port": int(os.getenv("PORT", "3000")),
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    "app_base_url": os.getenv("APP_BASE_URL", "http://localhost:3000"),
    "environment": os.getenv("ENVIRONMENT", "development"),
    "jwt_secret": os.getenv("JWT_SECRET"),
    "jwt_algorithm": os.getenv("JWT_ALGORITHM", "HS256"),
    "jwt_expire_minutes": int(os.getenv("JWT_EXPIRE_MINUTES", "1440")),
    "mailgun_api_key": os.getenv("MAILGUN_API_KEY"),
    "mailgun_domain": os.getenv("MAILGUN_DOMAIN"),
    "sender_email": os.getenv("SENDER_EMAIL"),
    # Scratch space for certificates, passes and QR codes. Served under /public.
    "artifact_dir": os.getenv("ARTIFACT_DIR", str(server_dir / "public")),
}
