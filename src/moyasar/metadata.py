"""Pluggable metadata validation.

Metadata is an open key/value bag attached to payments, invoices and webhook
payloads. A :class:`MetadataValidator` turns the raw ``dict[str, str]`` into
whatever shape the caller wants to work with, and is injected once into
``MoyasarClient`` so every service agrees on what valid metadata looks like.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from moyasar.errors import MetadataValidationError
from moyasar.validation.common import format_errors

M = TypeVar("M")
M_co = TypeVar("M_co", covariant=True)
ModelT = TypeVar("ModelT", bound=BaseModel)

Metadata = dict[str, str]

# Documented gateway limits. Only BoundedMetadataValidator enforces them.
METADATA_MAX_KEYS = 30
METADATA_MAX_KEY_LENGTH = 40
METADATA_MAX_VALUE_LENGTH = 500


class MetadataValidator(Protocol[M_co]):
    def parse(self, raw: Mapping[str, str]) -> M_co:
        """Return the typed metadata, raising MetadataValidationError on mismatch."""
        ...


class IdentityMetadataValidator:
    """Default validator: accepts any mapping and returns a plain dict copy."""

    def parse(self, raw: Mapping[str, str]) -> Metadata:
        if not isinstance(raw, Mapping):
            raise MetadataValidationError([f"metadata must be an object, got {type(raw).__name__}"])
        return dict(raw)


class PydanticMetadataValidator(Generic[ModelT]):
    """Validates metadata against a pydantic model.

    Example::

        class OrderMetadata(BaseModel):
            order_id: str

        client = MoyasarClient(api_key, metadata_validator=PydanticMetadataValidator(OrderMetadata))
    """

    def __init__(self, model: type[ModelT]):
        self.model = model

    def parse(self, raw: Mapping[str, str]) -> ModelT:
        try:
            return self.model.model_validate(raw)
        except ValidationError as exc:
            raise MetadataValidationError(format_errors(exc)) from exc


class BoundedMetadataValidator(Generic[M]):
    """Enforces the documented metadata limits before delegating."""

    def __init__(
        self,
        inner: MetadataValidator[M] | None = None,
        *,
        max_keys: int = METADATA_MAX_KEYS,
        max_key_length: int = METADATA_MAX_KEY_LENGTH,
        max_value_length: int = METADATA_MAX_VALUE_LENGTH,
    ):
        self.inner = inner or IdentityMetadataValidator()
        self.max_keys = max_keys
        self.max_key_length = max_key_length
        self.max_value_length = max_value_length

    def parse(self, raw: Mapping[str, str]) -> M:
        errors = []
        if len(raw) > self.max_keys:
            errors.append(f"metadata: at most {self.max_keys} keys allowed, got {len(raw)}")
        for key, value in raw.items():
            if len(key) > self.max_key_length:
                errors.append(f"metadata.{key}: key longer than {self.max_key_length} characters")
            if isinstance(value, str) and len(value) > self.max_value_length:
                errors.append(f"metadata.{key}: value longer than {self.max_value_length} characters")
        if errors:
            raise MetadataValidationError(errors)
        return self.inner.parse(raw)
