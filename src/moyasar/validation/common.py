"""Shared schema building blocks and the two validation entry points.

``validate_request`` returns a :class:`ValidationResult` so callers can show
every problem at once; ``parse_response`` raises :class:`ResponseParseError`
because a malformed gateway reply cannot be fixed by the caller.
"""
from __future__ import annotations

import dataclasses
import ipaddress
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Annotated, Any, TypeVar
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, StrictInt, ValidationError

from moyasar.errors import ResponseParseError
from moyasar.models.common import Currency, PaginationMeta, ValidationResult

if TYPE_CHECKING:
    from moyasar.metadata import MetadataValidator

SchemaT = TypeVar("SchemaT", bound=BaseModel)
ContractT = TypeVar("ContractT")

ErrorFormatter = Callable[[ValidationError, Any], list[str]]


def _upper(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


def _check_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be a valid URL")
    return value


def _check_https_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme != "https" or not parsed.netloc:
        raise ValueError("must be a valid HTTPS URL")
    return value


def _check_ipv4(value: str) -> str:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        raise ValueError("must be a valid IPv4 address") from None
    return value


Amount = Annotated[StrictInt, Field(ge=1)]
MinorUnits = Annotated[StrictInt, Field(ge=0)]
CurrencyCode = Annotated[Currency, BeforeValidator(_upper)]
HttpUrl = Annotated[str, AfterValidator(_check_url)]
HttpsUrl = Annotated[str, AfterValidator(_check_https_url)]
IPv4 = Annotated[str, AfterValidator(_check_ipv4)]
NonEmptyStr = Annotated[str, Field(min_length=1)]
StringMetadata = dict[str, str]


class Schema(BaseModel):
    """Base for every schema; unknown keys are dropped, as on the wire."""

    model_config = ConfigDict(extra="ignore")


class PaginationMetaSchema(Schema):
    current_page: int
    next_page: int | None
    prev_page: int | None
    total_pages: int
    total_count: int


def error_path(loc: tuple[int | str, ...], data: Any = None) -> list[int | str]:
    """Drop the tag segments pydantic inserts for discriminated unions.

    ``("source", "creditcard", "number")`` becomes ``["source", "number"]``.
    Tags are recognised by walking ``data`` alongside ``loc``: a segment equal
    to the ``type`` of the mapping it would index is the tag.
    """
    path: list[int | str] = []
    current = data
    tag_skipped = False
    for part in loc:
        if not tag_skipped and isinstance(current, Mapping) and current.get("type") == part:
            tag_skipped = True
            continue
        tag_skipped = False
        path.append(part)
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, (list, tuple)) and isinstance(part, int) and 0 <= part < len(current):
            current = current[part]
        else:
            current = None
    return path


def error_message(error: dict[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    if error["type"] == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return error["msg"]


def format_error(error: dict[str, Any], data: Any = None, *, strip: int = 0) -> str:
    loc = error_path(error["loc"], data)[strip:]
    if error["type"] in ("union_tag_invalid", "union_tag_not_found"):
        ctx = error.get("ctx") or {}
        loc.append(str(ctx.get("discriminator", "type")).strip("'"))
    path = ".".join(str(part) for part in loc)
    message = error_message(error)
    return f"{path}: {message}" if path else message


def format_errors(exc: ValidationError, data: Any = None) -> list[str]:
    """Flatten a pydantic error into ``"dotted.path: message"`` strings."""
    return [format_error(error, data) for error in exc.errors()]


def validate_request(
    schema: type[SchemaT],
    data: Any,
    *,
    formatter: ErrorFormatter = format_errors,
) -> ValidationResult[dict[str, Any]]:
    """Validate a request body, returning the wire-ready dict on success."""
    try:
        model = schema.model_validate(data)
    except ValidationError as exc:
        return ValidationResult.fail(formatter(exc, data))
    return ValidationResult.ok(model.model_dump(mode="json", by_alias=True, exclude_unset=True))


def parse_response(schema: type[SchemaT], raw: Any) -> SchemaT:
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        raise ResponseParseError(format_errors(exc, raw), payload=raw) from exc


def to_contract(contract: type[ContractT], model: BaseModel, **overrides: Any) -> ContractT:
    """Build a dataclass contract from a schema instance with the same field set."""
    values = {
        f.name: getattr(model, f.name)
        for f in dataclasses.fields(contract)  # type: ignore[arg-type]
        if f.name not in overrides
    }
    return contract(**values, **overrides)


def to_pagination_meta(schema: PaginationMetaSchema) -> PaginationMeta:
    return to_contract(PaginationMeta, schema)


def parse_metadata(raw: dict[str, str] | None, validator: MetadataValidator[Any], payload: Any) -> Any:
    """Run response metadata through the injected validator."""
    if raw is None:
        return None
    try:
        return validator.parse(raw)
    except Exception as exc:
        errors = getattr(exc, "errors", None)
        messages = errors if isinstance(errors, list) else [f"metadata: {exc}"]
        raise ResponseParseError(messages, payload=payload) from exc
