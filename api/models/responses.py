# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for API endpoints with HAL support.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime


class HalLink(BaseModel):
    """HAL link representation."""

    href: str = Field(..., description="Link URL")
    method: Optional[str] = Field(None, description="HTTP method")
    type: Optional[str] = Field(None, description="Content type")
    title: Optional[str] = Field(None, description="Link title")
    templated: Optional[bool] = Field(None, description="Whether URL is templated")


class FormResponse(BaseModel):
    """
    Contract form representation returned to clients.

    ``questions`` is the stored variant map on create/update responses and the
    flattened, ordering-indexed sequence on fetch responses.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Form ID")
    title: str = Field(..., description="Form title")
    description: Optional[str] = Field(None, description="Form description")
    is_public: Optional[bool] = Field(None, description="Whether other accounts may see the form")
    filled: Optional[bool] = Field(None, description="Whether answers have been entered")
    common: Optional[bool] = Field(None, description="Whether the form is a shared template")
    tags: List[str] = Field(default_factory=list, description="Search tags")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    questions: Union[List[Optional[Dict[str, Any]]], Dict[str, Any]] = Field(
        default_factory=dict, description="Questions"
    )

    def to_json(self) -> Dict[str, Any]:
        """JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)


class ErrorResponse(BaseModel):
    """RFC 7807 problem document."""

    type: str = Field(..., description="Problem type URI")
    title: str = Field(..., description="Short summary")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Human-readable explanation")
    instance: str = Field(..., description="Request path")
    errors: Optional[List[Dict[str, Any]]] = Field(None, description="Validation errors")


class FormResource(FormResponse):
    """Form representation together with its HAL links."""

    links: Dict[str, HalLink] = Field(default_factory=dict, alias="_links")


class FormCollectionResponse(BaseModel):
    """Paginated HAL collection of forms."""

    total: int = Field(..., description="Number of matching forms")
    page: int = Field(..., description="Current page")
    page_size: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Number of pages")
    links: Dict[str, HalLink] = Field(default_factory=dict, alias="_links")
    embedded: Dict[str, List[FormResource]] = Field(default_factory=dict, alias="_embedded")
