import logging
from collections.abc import Callable, Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, NoReturn, TypeVar

from moyasar.errors import GatewayError, RequestValidationError, wrap_error
from moyasar.metadata import MetadataValidator
from moyasar.models.common import ValidationResult
from moyasar.transport.http import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Python-friendly filter names and the query keys the gateway expects.
FILTER_ALIASES = {
    "created_after": "created[gt]",
    "created_before": "created[lt]",
    "updated_after": "updated[gt]",
    "updated_before": "updated[lt]",
}


def build_metadata_query(metadata: Mapping[str, str]) -> dict[str, str]:
    """``{"order": "1"}`` -> ``{"metadata[order]": "1"}``."""
    return {f"metadata[{key}]": value for key, value in metadata.items()}


def _query_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def build_query(filters: Mapping[str, Any]) -> dict[str, Any]:
    """Turn list filters into query parameters, dropping the ones set to None."""
    query: dict[str, Any] = {}
    for key, value in filters.items():
        if value is None:
            continue
        if key == "metadata":
            query.update(build_metadata_query(value))
            continue
        query[FILTER_ALIASES.get(key, key)] = _query_value(value)
    return query


class BaseService:
    """Shared plumbing: calls the transport and re-raises failures as ``error_class``."""

    error_class: type[GatewayError] = GatewayError

    def __init__(self, transport: Transport, metadata_validator: MetadataValidator[Any]):
        self.transport = transport
        self.metadata_validator = metadata_validator

    def _fail(self, error: GatewayError, prefix: str) -> NoReturn:
        wrapped = wrap_error(error, self.error_class, prefix)
        if wrapped is error:
            raise error
        raise wrapped from error

    def _require_id(self, value: str, label: str) -> None:
        if not value:
            raise self.error_class(
                f"{label} is required",
                error_type="invalid_request_error",
                status_code=400,
            )

    def _validated(self, result: ValidationResult[dict[str, Any]], prefix: str) -> dict[str, Any]:
        if not result.success:
            logger.debug("%s: request rejected before sending: %s", prefix, result.errors)
            self._fail(RequestValidationError(result.errors), prefix)
        return result.data  # type: ignore[return-value]

    def _request(
        self,
        prefix: str,
        method: str,
        path: str,
        parse: Callable[[Any], T],
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> T:
        """Send a request and parse the reply, wrapping any GatewayError.

        ``prefix`` names the operation in the wrapped error's message,
        e.g. ``"Failed to create payment"``.
        """
        try:
            raw = self.transport.request(method, path, params=params, json=json)
            return parse(raw)
        except GatewayError as exc:
            self._fail(exc, prefix)
