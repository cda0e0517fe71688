"""Configuration and settings for the club dashboard."""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

import structlog
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

DATA_FILE = Path(os.getenv("CLUBDESK_DATA_FILE", "data/club.json"))
SECRET_KEY = os.getenv("CLUBDESK_SECRET_KEY", "clubdesk-dev")
CURRENCY = os.getenv("CLUBDESK_CURRENCY", "MAD")
LOG_LEVEL = os.getenv("CLUBDESK_LOG_LEVEL", "INFO")
DEFAULT_CLUB_NAME = os.getenv("CLUBDESK_DEFAULT_CLUB_NAME", "Votre Club")

# Competition used by the rankings page when none is selected
DEFAULT_COMPETITION = "Match de Championnat"

COMPETITION_TYPES = [
    "Match de Championnat",
    "Match de Coupe",
    "Tournoi",
]

EVENT_TYPES = COMPETITION_TYPES + ["Entraînement", "Stage", "Réunion"]

PLAYER_CATEGORIES = [
    "Seniors", "Seniors F", "U19", "U18", "U17", "U17 F", "U16", "U15", "U15 F", "U14",
    "U13", "U13 F", "U12", "U11", "U11 F", "U10", "U9", "U8", "U7", "Vétérans", "École de foot",
]

PAYMENT_METHODS = ["Espèces", "Carte Bancaire", "Virement", "Chèque"]

DEFAULT_PAYMENT_DESCRIPTION = "Cotisation annuelle"
DEFAULT_PAYMENT_AMOUNT = 1500.0
DEFAULT_SALARY_AMOUNT = 5000.0


def settings() -> Dict[str, Any]:
    """Return the Flask-style settings mapping built from the environment."""
    return {
        "SECRET_KEY": SECRET_KEY,
        "CLUBDESK_DATA_FILE": DATA_FILE,
        "CLUBDESK_CURRENCY": CURRENCY,
        "CLUBDESK_LOG_LEVEL": LOG_LEVEL,
    }


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Resolved per call so a swapped or closed stderr is never kept around.
    return structlog.PrintLogger(sys.stderr)


def configure_logging(level: str = LOG_LEVEL) -> None:
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
