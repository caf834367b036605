# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas for business contract forms.
"""

# Base models
from .base import DocumentModel, generate_object_id

# Enumerations
from .enums import QuestionType, OwnerKind

# Question variants
from .questions import (
    QuestionBase,
    CommentQuestion,
    TextQuestion,
    TextareaQuestion,
    CheckboxQuestion,
    CheckboxGroupQuestion,
    RadiobuttonGroupQuestion,
    RadiobuttonGroupHorizontalQuestion,
    ContactInformationQuestion,
    DatepickerQuestion,
    TimepickerQuestion,
    Question,
    QuestionMap,
    QUESTION_MODELS
)

# Core entities
from .entities import FormContent, Form, UserContext

# Request models
from .requests import CreateFormRequest, UpdateFormRequest, FormListParams, FormPath, FormCounterpartyPath

# Response models
from .responses import HalLink, FormResponse, FormResource, FormCollectionResponse, ErrorResponse

__all__ = [
    # Base models
    "DocumentModel",
    "generate_object_id",

    # Enumerations
    "QuestionType",
    "OwnerKind",

    # Question variants
    "QuestionBase",
    "CommentQuestion",
    "TextQuestion",
    "TextareaQuestion",
    "CheckboxQuestion",
    "CheckboxGroupQuestion",
    "RadiobuttonGroupQuestion",
    "RadiobuttonGroupHorizontalQuestion",
    "ContactInformationQuestion",
    "DatepickerQuestion",
    "TimepickerQuestion",
    "Question",
    "QuestionMap",
    "QUESTION_MODELS",

    # Core entities
    "FormContent",
    "Form",
    "UserContext",

    # Request models
    "CreateFormRequest",
    "UpdateFormRequest",
    "FormListParams",
    "FormPath",
    "FormCounterpartyPath",

    # Response models
    "HalLink",
    "FormResponse",
    "FormResource",
    "FormCollectionResponse",
    "ErrorResponse"
]
