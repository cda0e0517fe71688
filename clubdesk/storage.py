"""Persistent storage helpers for the club dashboard."""
from __future__ import annotations

import dataclasses
import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Type, TypeVar, get_args, get_origin, get_type_hints

import structlog

from . import config

logger = structlog.get_logger(__name__)

DATA_FILE = config.DATA_FILE
DEFAULT_STRUCTURE: Dict[str, Any] = {
    "club": {},
    "categories": [],
    "players": [],
    "coaches": [],
    "opponents": [],
    "events": [],
    "payments": [],
    "salaries": [],
}

T = TypeVar("T")


def use_data_file(path: Path | str) -> None:
    """Point the storage helpers at another JSON file."""
    global DATA_FILE
    DATA_FILE = Path(path)


def ensure_storage() -> None:
    """Create the storage file if it does not exist."""
    if not DATA_FILE.parent.exists():
        DATA_FILE.parent.mkdir(parents=True, exist_ok=True)
    if not DATA_FILE.exists():
        DATA_FILE.write_text(json.dumps(DEFAULT_STRUCTURE, indent=2), encoding="utf-8")
        logger.info("storage_created", path=str(DATA_FILE))


def load_data() -> Dict[str, Any]:
    ensure_storage()
    data = json.loads(DATA_FILE.read_text(encoding="utf-8"))
    for key, default in DEFAULT_STRUCTURE.items():
        if key in data:
            continue
        if isinstance(default, (list, dict)):
            data[key] = default.copy()
        else:
            data[key] = default
    return data


def save_data(data: Dict[str, Any]) -> None:
    ensure_storage()
    DATA_FILE.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def next_id(items: Iterable[Dict[str, Any]]) -> int:
    """Return the next integer id for a collection of dictionaries."""
    max_id = 0
    for item in items:
        max_id = max(max_id, int(item.get("id", 0)))
    return max_id + 1


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(value)


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    return value


def serialize_entity(entity: Any) -> Dict[str, Any]:
    payload = entity.to_dict() if hasattr(entity, "to_dict") else dataclasses.asdict(entity)
    return _jsonable(payload)


def _annotation_args(annotation: Any) -> tuple:
    if annotation is None:
        return ()
    if get_origin(annotation) is None:
        return (annotation,)
    return get_args(annotation)


def _restore(annotation: Any, value: Any) -> Any:
    """Turn a stored JSON value back into the type named by ``annotation``."""
    if value is None:
        return None
    args = _annotation_args(annotation)
    if isinstance(value, str):
        if datetime in args:
            return parse_datetime(value)
        if date in args:
            return parse_date(value)
        return value
    if isinstance(value, list) and get_origin(annotation) in (list, tuple):
        item_type = next(iter(get_args(annotation)), None)
        if item_type is not None and dataclasses.is_dataclass(item_type):
            return [instantiate(item_type, item) if isinstance(item, dict) else item for item in value]
    return value


def instantiate(model_cls: Type[T], payload: Dict[str, Any]) -> T:
    """Create a dataclass instance from the stored payload."""

    type_hints = get_type_hints(model_cls)
    kwargs: Dict[str, Any] = {}
    for field in dataclasses.fields(model_cls):  # type: ignore[arg-type]
        if field.name not in payload:
            continue
        kwargs[field.name] = _restore(type_hints.get(field.name), payload[field.name])
    return model_cls(**kwargs)  # type: ignore[arg-type]
