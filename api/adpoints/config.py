import os
from pathlib import Path
from pydantic import BaseModel
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parents[1] / ".env"


class Settings(BaseModel):
    db_path: str = "./adpoints.db"
    jwt_secret: str
    admin_username: str | None = None
    admin_password: str | None = None
    cooldown_ms: int = 30000
    port: int = 4000
    token_hours: int = 24
    bcrypt_rounds: int = 10
    allowed_origins: list[str] = ["*"]
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")
    if value < 0:
        raise RuntimeError(f"{name} must not be negative")
    return value


def load_settings() -> Settings:
    """Build Settings from the environment (api/.env wins over the shell)."""
    if ENV_PATH.exists():
        load_dotenv(ENV_PATH, override=True)

    jwt_secret = (os.getenv("JWT_SECRET") or "").strip()
    if not jwt_secret:
        raise RuntimeError("Missing JWT_SECRET in environment.")

    origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

    return Settings(
        db_path=os.getenv("DB_PATH") or "./adpoints.db",
        jwt_secret=jwt_secret,
        admin_username=os.getenv("ADMIN_USERNAME") or None,
        admin_password=os.getenv("ADMIN_PASSWORD") or None,
        cooldown_ms=_int_env("COOLDOWN_MS", 30000),
        port=_int_env("PORT", 4000),
        token_hours=_int_env("TOKEN_HOURS", 24),
        bcrypt_rounds=_int_env("BCRYPT_ROUNDS", 10),
        allowed_origins=origins or ["*"],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
