"""Structural validation shared by the spec schemas.

Structural problems (types, formats, square grid, unique names, link
endpoints) are fatal and raise SpecValidationError. Cross-reference problems
are only discovered during reconciliation and are recorded, never raised.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from roomlayout.core.errors import LayoutError

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"

ModelT = TypeVar("ModelT", bound=BaseModel)


class SpecValidationError(LayoutError, ValueError):
    """Raised when a spec violates a structural rule."""

    pass


class SpecModel(BaseModel):
    """Base for all spec schemas: camelCase at the boundary, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
        serialize_by_alias=True,
        extra="forbid",
    )

    def to_dict(self) -> dict[str, Any]:
        """Boundary representation (camelCase keys, unset optionals omitted)."""
        return self.model_dump(mode="json", exclude_none=True)


def validate_model(model_type: type[ModelT], data: Any) -> ModelT:
    """Validate arbitrary data (dict or model instance) into model_type.

    Never returns the object passed in: the result shares no references with
    the input.

    Raises:
        SpecValidationError: If any structural rule is violated.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="python")
    try:
        return model_type.model_validate(data)
    except ValidationError as e:
        raise SpecValidationError(
            f"Invalid {model_type.__name__}: {e.error_count()} error(s)\n{e}"
        ) from e
