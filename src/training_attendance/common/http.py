from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .datetime_utils import ensure_date


def to_jsonable(value: Any) -> Any:
    """Turn domain dataclasses (and what they hold) into JSON-ready values."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, dict):
        return {str(k.value if isinstance(k, Enum) else k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]
    return value


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    payload: dict[str, Any] = {"success": True}
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = to_jsonable(data)
    return jsonify(payload), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Vui lòng đăng nhập để tiếp tục!"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Vui lòng đăng nhập để tiếp tục!"}), 401
        if session.get("role") != Role.ADMIN.value:
            raise AuthorizationError("Bạn không có quyền thực hiện thao tác này")
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def arg_int(name: str, *, source: Optional[dict] = None) -> Optional[int]:
    raw = (source if source is not None else request.args).get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Tham số {name} không hợp lệ")


def arg_float(name: str, *, source: Optional[dict] = None) -> Optional[float]:
    raw = (source if source is not None else request.args).get(name)
    if raw in (None, ""):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Tham số {name} không hợp lệ")


def arg_date(name: str, *, default: Optional[date] = None) -> Optional[date]:
    raw = request.args.get(name)
    if not raw:
        return default
    return ensure_date(raw)


def require_arg_date(name: str) -> date:
    value = arg_date(name)
    if value is None:
        raise ValidationError(f"Thiếu tham số {name}")
    return value
