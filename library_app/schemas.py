"""
Request schemas.

Every JSON body and query string is parsed into one of these models before a
service is called; services never see raw dicts.
"""
import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from library_app.errors import ValidationError

ISBN_RE = re.compile(
    r"^(?:ISBN(?:-1[03])?:? )?"
    r"(?=[0-9X]{10}$|(?=(?:[0-9]+[- ]){3})[- 0-9X]{13}$|97[89][0-9]{10}$|(?=(?:[0-9]+[- ]){4})[- 0-9]{17}$)"
    r"(?:97[89][- ]?)?[0-9]{1,5}[- ]?[0-9]+[- ]?[0-9]+[- ]?[0-9X]$"
)


def _check_isbn(value):
    if value is not None and not ISBN_RE.match(value):
        raise ValueError("Please provide a valid ISBN number")
    return value


class _Body(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class _Query(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, populate_by_name=True)


class RegisterIn(_Body):
    username: str = Field(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
            raise ValueError(
                "Password must contain at least one lowercase letter, one uppercase letter, and one number"
            )
        return value


class LoginIn(_Body):
    email: EmailStr
    password: str = Field(min_length=1)


class BookIn(_Body):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=100)
    isbn: str

    @field_validator("isbn")
    @classmethod
    def valid_isbn(cls, value):
        return _check_isbn(value)


class BookUpdateIn(_Body):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    author: Optional[str] = Field(default=None, min_length=1, max_length=100)
    isbn: Optional[str] = None

    @field_validator("isbn")
    @classmethod
    def valid_isbn(cls, value):
        return _check_isbn(value)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.changes():
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class PageQuery(_Query):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class BookQuery(PageQuery):
    search: Optional[str] = Field(default=None, min_length=1, max_length=100)
    search_by: Literal["title", "author", "both"] = Field(default="both", alias="searchBy")
    available: Optional[bool] = None


class BorrowQuery(PageQuery):
    status: Optional[Literal["BORROWED", "RETURNED"]] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return value.upper() if isinstance(value, str) else value


def _field(error) -> str:
    return ".".join(str(part) for part in error["loc"])


def _message(error) -> str:
    ctx = error.get("ctx") or {}
    if error["type"] == "value_error" and "error" in ctx:
        return str(ctx["error"])
    field = _field(error)
    return f"{field}: {error['msg']}" if field else error["msg"]


def parse(schema, data):
    """Validate ``data`` into ``schema`` or raise a 400 ValidationError."""
    try:
        return schema.model_validate(data if data is not None else {})
    except PydanticValidationError as e:
        errors = e.errors(include_url=False)
        raise ValidationError(
            _message(errors[0]),
            details=[{"field": _field(err), "message": _message(err)} for err in errors],
        )
