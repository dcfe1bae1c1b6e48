# secretaria/utils/responses.py
"""Success envelope shared by every endpoint."""
from typing import Any, Dict, Optional

from sqlalchemy import inspect


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    content: Dict[str, Any] = {"success": True, "data": data}
    if message:
        content["message"] = message
    return content


def is_loaded(obj: Any, attribute: str) -> bool:
    """True when a relationship was eagerly loaded and can be read without IO."""
    return attribute not in inspect(obj).unloaded


def isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None
