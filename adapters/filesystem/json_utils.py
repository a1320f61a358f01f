from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
from pydantic import BaseModel

DiagramPayload = list[Any] | dict[str, Any]


def read_diagram_payload(path: Path) -> DiagramPayload:
    """Read a diagram file: a bare record list or a versioned document object."""
    payload = orjson.loads(path.read_bytes())
    if not isinstance(payload, list | dict):
        msg = f"{path}: expected a list of equipment records or a document object"
        raise ValueError(msg)
    return payload


def _encode_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Path):
        return str(value)
    msg = f"Type is not JSON serializable: {type(value).__name__}"
    raise TypeError(msg)


def encode_json(payload: Any, *, indent: bool = True) -> bytes:
    option = orjson.OPT_APPEND_NEWLINE
    if indent:
        option |= orjson.OPT_INDENT_2
    return orjson.dumps(payload, default=_encode_default, option=option)


def write_json_atomic(path: Path, payload: Any, *, indent: bool = True) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        tmp_path.write_bytes(encode_json(payload, indent=indent))
        tmp_path.replace(path)
    finally:
        tmp_path.unlink(missing_ok=True)
