"""
Configuration for the currency editor service.

Values come from the environment, after loading a .env file if present.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


@dataclass
class Settings:
    secret_key: str = "dev-secret-change-me"
    port: int = 5000
    log_level: str = "INFO"
    log_file: Optional[str] = None
    display_places: int = 2  # decimals shown in conversion previews
    default_conversion: float = 1  # rate pre-filled on a new tier form


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Load .env (if any) and build Settings from the environment."""
    load_dotenv(dotenv_path)
    return Settings(
        secret_key=os.environ.get("FLASK_SECRET_KEY", "dev-secret-change-me"),
        port=int(os.environ.get("PORT", 5000)),
        log_level=os.environ.get("COINAGE_LOG_LEVEL", "INFO").upper(),
        log_file=os.environ.get("COINAGE_LOG_FILE") or None,
        display_places=int(os.environ.get("COINAGE_DISPLAY_PLACES", 2)),
        default_conversion=float(os.environ.get("COINAGE_DEFAULT_CONVERSION", 1)),
    )


def configure_logging(settings: Settings):
    """Set up timestamped logging to stderr and, optionally, a log file."""
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
    )
