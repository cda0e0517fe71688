"""Core package for the ClubDesk football club dashboard."""

from importlib import resources


def _load_version() -> str:
    try:
        return resources.files(__name__).joinpath("VERSION").read_text(encoding="utf-8").strip()
    except FileNotFoundError:  # pragma: no cover - fallback for editable installs
        return "0.0.0"


__version__ = _load_version()

__all__ = [
    "models",
    "ledger",
    "standings",
    "storage",
    "services",
    "__version__",
]
