import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

PROFILE_URL = "https://app.koyeb.com/v1/account/profile"


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def _number(name: str, default, cast=int):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a valid number, using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    KOYEB_TOKEN: Optional[str] = _optional("KOYEB_TOKEN")
    KOYEB_APP_URL: Optional[str] = _optional("KOYEB_APP_URL")
    API_URL: str = os.getenv("KA_API_URL", PROFILE_URL)
    KV_DIR: Optional[str] = _optional("KA_KV_DIR")
    LOG_LIMIT: int = _number("KA_LOG_LIMIT", 20)
    UA: str = os.getenv("KA_UA", "KoyebKeepAlive/1.2 (+https://github.com/justlagom/koyebne)")
    INTERVAL_S: float = _number("KA_INTERVAL_S", 600.0, cast=float)

    @property
    def has_token(self) -> bool:
        return bool(self.KOYEB_TOKEN)


settings = Settings()
