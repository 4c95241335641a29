"""Runtime settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_CODE_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
DEFAULT_CODE_LENGTH = 5


@dataclass(frozen=True)
class Settings:
    secret_key: str = "gift-exchange-secret"
    host: str = "0.0.0.0"
    port: int = 5000
    async_mode: str = "eventlet"
    cors_allowed_origins: str = "*"
    log_level: str = "INFO"
    code_alphabet: str = DEFAULT_CODE_ALPHABET
    code_length: int = DEFAULT_CODE_LENGTH


def load_settings() -> Settings:
    port_raw = os.getenv("GIFT_EXCHANGE_PORT") or os.getenv("PORT", "5000")
    return Settings(
        secret_key=os.getenv("SECRET_KEY", "gift-exchange-secret"),
        host=os.getenv("GIFT_EXCHANGE_HOST", "0.0.0.0"),
        port=int(port_raw),
        async_mode=os.getenv("GIFT_EXCHANGE_ASYNC_MODE", "eventlet"),
        cors_allowed_origins=os.getenv("GIFT_EXCHANGE_CORS_ORIGINS", "*"),
        log_level=os.getenv("GIFT_EXCHANGE_LOG_LEVEL", "INFO").upper(),
        code_alphabet=os.getenv("GIFT_EXCHANGE_CODE_ALPHABET", DEFAULT_CODE_ALPHABET),
        code_length=int(os.getenv("GIFT_EXCHANGE_CODE_LENGTH", str(DEFAULT_CODE_LENGTH))),
    )


def configure_logging(level="INFO"):
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logger = logging.getLogger("gift_exchange")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False
    return logger
