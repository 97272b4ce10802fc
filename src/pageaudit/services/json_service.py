import json
from typing import Any

from pydantic import BaseModel


def to_json(data: Any, indent: int = 2, ensure_ascii: bool = False) -> str:
    """
    Convert a report (or a dict/list of reports) to a JSON string.
    Pydantic models are dumped with their camelCase field names.
    """
    def default(obj):
        if isinstance(obj, BaseModel):
            return obj.model_dump(by_alias=True)
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    return json.dumps(data, ensure_ascii=ensure_ascii, indent=indent, default=default)
