# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base models with common configuration and identifier helpers.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from bson import ObjectId


def generate_object_id() -> str:
    """Generate a new MongoDB ObjectId as string."""
    return str(ObjectId())


def utcnow() -> datetime:
    """Current UTC time truncated to millisecond precision (BSON date resolution)."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


class DocumentModel(BaseModel):
    """
    Base for models persisted as camelCase documents.

    Python attributes are snake_case; the stored and wire representation uses
    camelCase aliases. Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        alias_generator=to_camel,
        # Use enum values instead of enum objects
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True
    )

    def to_document(self) -> dict:
        """Dump only the fields that were supplied, using camelCase keys."""
        return self.model_dump(by_alias=True, exclude_unset=True)
