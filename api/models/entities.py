# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for business contract forms.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from bson import ObjectId

from .base import DocumentModel, generate_object_id, utcnow
from .enums import OwnerKind
from .questions import QuestionMap, partition_question_sequence

TagText = Annotated[str, Field(max_length=20)]
Questions = Annotated[QuestionMap, BeforeValidator(partition_question_sequence)]


class FormContent(DocumentModel):
    """Caller-editable part of a contract form."""

    title: str = Field(..., max_length=1000, description="Form title")
    description: Optional[str] = Field(None, max_length=1000, description="Form description")
    is_public: bool = Field(..., description="Whether other accounts may see the form")
    filled: bool = Field(..., description="Whether answers have been entered")
    common: bool = Field(..., description="Whether the form is a shared template")
    questions: Questions = Field(default_factory=QuestionMap, description="Questions grouped by variant")
    tags: List[TagText] = Field(default_factory=list, description="Search tags")

    @field_validator("questions", mode="before")
    @classmethod
    def validate_questions_present(cls, v):
        """Treat an explicit null as an empty question set."""
        if v is None:
            return {}
        return v


class Form(FormContent):
    """Persisted business contract form."""

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v):
        """Accept ObjectId values read straight from the store."""
        if isinstance(v, ObjectId):
            return str(v)
        if not ObjectId.is_valid(v):
            raise ValueError(f"Invalid form identifier: {v}")
        return v

    def to_document(self) -> Dict[str, Any]:
        """Serialize into the stored document shape (``_id`` as ObjectId)."""
        document = self.model_dump(by_alias=True, exclude_unset=True, exclude={"id", "created_at", "questions"})
        document["_id"] = ObjectId(self.id)
        document["createdAt"] = self.created_at
        document["questions"] = self.questions.to_document()
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Form":
        """Build a Form from a stored document."""
        data = dict(document)
        data["id"] = data.pop("_id")
        return cls.model_validate(data)


class UserContext(BaseModel):
    """Authenticated caller, as populated from the bearer token."""

    user_id: str = Field(..., description="Authenticated owner ID")
    owner_kind: OwnerKind = Field(..., description="Account kind of the caller")
    email: Optional[str] = Field(None, description="User email")
    name: Optional[str] = Field(None, description="User display name")
    token_payload: Optional[Dict[str, Any]] = Field(None, description="Original JWT payload")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")

    model_config = ConfigDict(
        use_enum_values=False
    )

    def is_any(self, *kinds: OwnerKind) -> bool:
        """Check if the caller is one of the given account kinds."""
        return self.owner_kind in kinds
