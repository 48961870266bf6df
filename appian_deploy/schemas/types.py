"""
Shared type definitions for schemas.

Layering:
- This module provides FOUNDATION types (BaseStrictModel, PermissiveModel, JSON scalars)
- api.py, results.py, status.py and operations.py import from here
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, TypeAlias

import pydantic

# ==============================================================================
# Base Strict Model (Foundation)
# ==============================================================================


class BaseStrictModel(pydantic.BaseModel):
    """
    Foundation strict model.

    Uses extra='forbid' to reject unknown fields - any field not modeled
    causes immediate validation failure (fail-fast). Requests and local
    value records use it.
    """

    model_config = pydantic.ConfigDict(
        extra='forbid',  # Reject unknown fields (fail-fast)
        strict=True,  # Strict type coercion
        frozen=True,  # Immutable after creation
        populate_by_name=True,  # Accept python names as well as wire aliases
    )


# ==============================================================================
# Permissive Model (Foundation)
# ==============================================================================


class PermissiveModel(pydantic.BaseModel):
    """
    Foundation permissive model for documents with informational extras.

    Symmetry with BaseStrictModel:
    - BaseStrictModel: extra='forbid' (rejects unknown fields)
    - PermissiveModel: extra='allow' (accepts unknown fields)

    Status documents, submission responses and results documents use this:
    the server may add fields that no decision depends on.
    """

    model_config = pydantic.ConfigDict(
        extra='allow',  # Accept unknown fields
        strict=True,  # Strict type coercion for known fields
        frozen=True,  # Immutable after creation
        populate_by_name=True,
    )

    def get_extra_fields(self) -> dict[str, object]:
        """Get extra fields captured by this permissive model."""
        return dict(self.__pydantic_extra__) if self.__pydantic_extra__ else {}


# ==============================================================================
# Primitive Types
# ==============================================================================

JsonDatetime: TypeAlias = Annotated[datetime, pydantic.Field(strict=False)]
"""Pydantic-enhanced datetime for JSON serialization (allows string->datetime conversion)."""

JsonUuid: TypeAlias = Annotated[uuid.UUID, pydantic.Field(strict=False)]
"""UUID accepted from its canonical string form."""
