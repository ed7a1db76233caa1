"""
Response envelope shared by all API endpoints.

    {"status": "ok", ...}
    {"status": "error", "message": "url already exists"}
"""

from typing import Iterable, Literal, Optional

from pydantic import BaseModel

STATUS_OK = "ok"
STATUS_ERROR = "error"


class Response(BaseModel):
    status: Literal["ok", "error"] = STATUS_OK
    message: Optional[str] = None


def error(message: str) -> Response:
    return Response(status=STATUS_ERROR, message=message)


def _field_name(loc: Iterable) -> str:
    # ("body", "url") -> "url"
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts) or "body"


def validation_error(errors: Iterable[dict]) -> Response:
    """
    Build one message listing every invalid field, e.g.
    "field url is a required field, field alias is not valid".
    """
    messages = []
    for err in errors:
        field = _field_name(err.get("loc", ()))
        err_type = err.get("type", "")

        if err_type == "missing" or (err_type == "string_too_short" and err.get("input") == ""):
            messages.append(f"field {field} is a required field")
        elif field == "url" and err_type != "string_type":
            messages.append(f"field {field} is not a valid URL")
        else:
            messages.append(f"field {field} is not valid")

    return error(", ".join(messages))
