from datetime import datetime
from typing import Optional

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

from shortlink_app.schemas.response import Response

ALIAS_MAX_LENGTH = 64
ALIAS_PATTERN = r"^[A-Za-z0-9_-]+$"
# Top-level paths the app serves itself; they can never act as aliases
RESERVED_ALIASES = frozenset({"health", "docs", "redoc"})

_url_adapter = TypeAdapter(AnyUrl)


class URLCreate(BaseModel):
    """Save request: the URL to shorten and an optional alias.

    The URL is validated but stored exactly as sent (no normalisation), so
    resolve/delete hand back the same string the caller saved.
    """
    url: str = Field(..., min_length=1, description="The original URL to be shortened")
    alias: Optional[str] = Field(
        None,
        max_length=ALIAS_MAX_LENGTH,
        pattern=ALIAS_PATTERN,
        description="Custom alias; generated when omitted",
    )

    @field_validator("url")
    @classmethod
    def url_must_be_valid(cls, value: str) -> str:
        try:
            _url_adapter.validate_python(value)
        except ValidationError:
            raise ValueError("not a valid URL") from None
        return value

    @field_validator("alias", mode="before")
    @classmethod
    def empty_alias_means_none(cls, value):
        # "" and null both mean "generate one for me"
        return value or None

    @field_validator("alias")
    @classmethod
    def alias_not_reserved(cls, value: Optional[str]) -> Optional[str]:
        if value in RESERVED_ALIASES:
            raise ValueError(f"alias '{value}' is reserved")
        return value


class URLSaved(Response):
    alias: str


class URLInfo(Response):
    alias: str
    url: str
    created_at: datetime
    updated_at: datetime


class URLDeleted(Response):
    deleted_url: str
