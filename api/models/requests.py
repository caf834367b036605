# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .base import DocumentModel
from .entities import FormContent, Questions, TagText


class CreateFormRequest(FormContent):
    """Request model for creating a contract form."""


class UpdateFormRequest(DocumentModel):
    """
    Request model for replacing a contract form.

    Content fields that are left out are cleared on the stored form; the
    required title and flags keep their stored values when left out.
    """

    title: Optional[str] = Field(None, max_length=1000, description="Form title")
    description: Optional[str] = Field(None, max_length=1000, description="Form description")
    is_public: Optional[bool] = Field(None, description="Whether other accounts may see the form")
    filled: Optional[bool] = Field(None, description="Whether answers have been entered")
    common: Optional[bool] = Field(None, description="Whether the form is a shared template")
    questions: Optional[Questions] = Field(None, description="Complete question set")
    tags: Optional[List[TagText]] = Field(None, description="Search tags")

    @field_validator("title", "is_public", "filled", "common")
    @classmethod
    def validate_not_null(cls, v, info):
        """Required form fields may be omitted but not nulled."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class FormListParams(BaseModel):
    """Query parameters for listing the caller's forms."""

    search: Optional[str] = Field(None, max_length=200, description="Full-text search terms")
    page: int = Field(default=1, ge=1, description="Page number")
    page_size: int = Field(default=20, ge=1, le=100, description="Items per page")

    @field_validator("search")
    @classmethod
    def validate_search(cls, v):
        """Blank search terms mean no search."""
        if v is None or not v.strip():
            return None
        return v.strip()


class FormPath(BaseModel):
    """Path parameters addressing one contract form."""

    form_id: str = Field(..., description="Form ID")


class FormCounterpartyPath(FormPath):
    """Path parameters for deleting a form held by the caller and a counterparty."""

    counterparty_id: str = Field(..., description="ID of the other account holding the form")
