"""JSON:API envelopes and validation rules for registered endpoints."""
import re
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

VERBS = ("GET", "HEAD", "OPTIONS", "TRACE", "PUT", "DELETE", "POST", "PATCH", "CONNECT")

Verb = Literal["GET", "HEAD", "OPTIONS", "TRACE", "PUT", "DELETE", "POST", "PATCH", "CONNECT"]

# Whitespace, control characters, and the query/fragment delimiters never appear in a request path
INVALID_PATH_CHARS = re.compile(r"[\s\x00-\x1f\x7f?#]")

# RFC 7230 token
HEADER_NAME = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

# Control characters other than horizontal tab, CR and LF included
INVALID_HEADER_VALUE_CHARS = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")

# pydantic error types -> validation tag reported to the client
ERROR_TAGS = {
    "missing": "required",
    "literal_error": "oneof",
    "greater_than_equal": "gte",
    "less_than_equal": "lte",
    "int_type": "int",
    "string_type": "string",
    "dict_type": "map",
    "model_type": "struct",
    "model_attributes_type": "struct",
}


def check_header_name(value: str) -> str:
    if not HEADER_NAME.fullmatch(value):
        raise PydanticCustomError("token", "header name must be an HTTP token")
    return value


def check_header_value(value: str) -> str:
    # Headers go out latin-1 encoded and without surrounding whitespace
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        raise PydanticCustomError("latin1", "header value must be latin-1 encodable")
    if INVALID_HEADER_VALUE_CHARS.search(value) or value != value.strip(" \t"):
        raise PydanticCustomError("printascii", "header value contains invalid characters")
    return value


HeaderName = Annotated[str, AfterValidator(check_header_name)]
HeaderValue = Annotated[str, AfterValidator(check_header_value)]


class Response(BaseModel):
    """Canned reply served when an endpoint matches."""
    code: int = Field(ge=100, le=599, strict=True)
    headers: dict[HeaderName, HeaderValue] = Field(default_factory=dict)
    body: str = ""

    def payload(self) -> str:
        """Body as written to the wire.

        A body wrapped in double quotes (a JSON-encoded string) loses exactly one
        leading and one trailing quote; anything else is served unchanged.
        """
        if len(self.body) >= 2 and self.body.startswith('"') and self.body.endswith('"'):
            return self.body[1:-1]
        return self.body


class Attributes(BaseModel):
    verb: Verb
    path: str
    response: Response

    @field_validator("path")
    @classmethod
    def check_path(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("required", "path must not be empty")
        if not value.startswith("/") or INVALID_PATH_CHARS.search(value):
            raise PydanticCustomError("uri", "path must be a valid URI path")
        return value


class Endpoint(BaseModel):
    type: Literal["endpoints"]
    id: int | None = None
    attributes: Attributes


class One(BaseModel):
    data: Endpoint


class Many(BaseModel):
    data: list[Endpoint]


class ErrorObject(BaseModel):
    code: str
    detail: str


class ErrorDocument(BaseModel):
    errors: list[ErrorObject]


def _is_decode_error(error: dict) -> bool:
    return error["type"] == "json_invalid" or not error["loc"]


def validation_message(exc: ValidationError) -> str:
    """Describe a failed envelope decode, one line per offending field.

    Lines read ``Key: 'Endpoint.Attributes.Verb' Error:Field validation for
    'Verb' failed on the 'oneof' tag``.
    """
    errors = exc.errors()
    for error in errors:
        if _is_decode_error(error):
            return f"Unable to decode request body: {error['msg']}"

    lines = []
    for error in errors:
        root, *rest = error["loc"]
        if root == "data" and rest:
            namespace = field = "Endpoint"
        else:
            field = str(root).capitalize()
            namespace = f"One.{field}"
            rest = []

        previous = None
        for part in rest:
            if part == "[key]":
                continue
            if previous == "headers":
                namespace += f"[{part}]"
                field += f"[{part}]"
            else:
                field = str(part).capitalize()
                namespace += f".{field}"
            previous = part

        tag = ERROR_TAGS.get(error["type"], error["type"])
        lines.append(f"Key: '{namespace}' Error:Field validation for '{field}' failed on the '{tag}' tag")

    return "\n".join(lines)
