# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Question variants for business contract forms.

Each variant is a pydantic model tagged by ``questionType``. Forms store
questions grouped by variant (``{"text": [...], "checkbox": [...]}``); the
tag is implied by the group key and never persisted on the record itself.
"""

from collections import Counter
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .base import DocumentModel
from .enums import QuestionType

OptionText = Annotated[str, Field(max_length=500)]


class QuestionBase(DocumentModel):
    """Fields shared by every question variant."""

    ordering: int = Field(..., ge=0, le=99, description="Position in the flattened form")
    title: str = Field(..., max_length=1000, description="Question title")


class CommentQuestion(QuestionBase):
    question_type: Literal["comment"] = Field("comment", exclude=True)


class TextQuestion(QuestionBase):
    question_type: Literal["text"] = Field("text", exclude=True)
    subtitle: Optional[str] = Field(None, max_length=1000)
    optional: bool = Field(..., description="Whether answering is optional")
    answer: Optional[str] = None
    answer_min_length: int = Field(..., description="Minimum answer length")
    answer_max_length: int = Field(..., description="Maximum answer length")


class TextareaQuestion(TextQuestion):
    question_type: Literal["textarea"] = Field("textarea", exclude=True)
    rows: int = Field(..., ge=0, le=50, description="Visible text rows")


class CheckboxQuestion(QuestionBase):
    question_type: Literal["checkbox"] = Field("checkbox", exclude=True)
    subtitle: Optional[str] = Field(None, max_length=1000)
    optional: bool
    checked: Optional[bool] = None


class CheckboxGroupQuestion(QuestionBase):
    question_type: Literal["checkbox_group"] = Field("checkbox_group", exclude=True)
    subtitle: Optional[str] = Field(None, max_length=1000)
    optional: bool
    options: List[OptionText] = Field(default_factory=list)
    option_values: List[Dict[str, Any]] = Field(default_factory=list)


class RadiobuttonGroupQuestion(CheckboxGroupQuestion):
    question_type: Literal["radiobutton_group"] = Field("radiobutton_group", exclude=True)


class RadiobuttonGroupHorizontalQuestion(CheckboxGroupQuestion):
    question_type: Literal["radiobutton_group_horizontal"] = Field(
        "radiobutton_group_horizontal", exclude=True
    )
    scale: Union[int, float] = Field(..., description="Number of scale steps")
    scale_option_title_left: Optional[str] = Field(None, max_length=75)
    scale_option_title_center: Optional[str] = Field(None, max_length=75)
    scale_option_title_right: Optional[str] = Field(None, max_length=75)


class ContactInformationQuestion(QuestionBase):
    question_type: Literal["contact_information"] = Field("contact_information", exclude=True)
    subtitle: Optional[str] = Field(None, max_length=1000)
    optional: bool
    contact_info_answer: Optional[Dict[str, Any]] = None


class DatepickerQuestion(QuestionBase):
    question_type: Literal["datepicker"] = Field("datepicker", exclude=True)
    title: str = Field(..., max_length=200)
    subtitle: Optional[str] = Field(None, max_length=500)
    optional: bool
    is_closed_time_frame: Optional[bool] = None
    answer: Optional[str] = None


class TimepickerQuestion(DatepickerQuestion):
    question_type: Literal["timepicker"] = Field("timepicker", exclude=True)


Question = Annotated[
    Union[
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
    ],
    Field(discriminator="question_type"),
]

QUESTION_MODELS = {
    QuestionType.COMMENT.value: CommentQuestion,
    QuestionType.TEXT.value: TextQuestion,
    QuestionType.TEXTAREA.value: TextareaQuestion,
    QuestionType.CHECKBOX.value: CheckboxQuestion,
    QuestionType.CHECKBOX_GROUP.value: CheckboxGroupQuestion,
    QuestionType.RADIOBUTTON_GROUP.value: RadiobuttonGroupQuestion,
    QuestionType.RADIOBUTTON_GROUP_HORIZONTAL.value: RadiobuttonGroupHorizontalQuestion,
    QuestionType.CONTACT_INFORMATION.value: ContactInformationQuestion,
    QuestionType.DATEPICKER.value: DatepickerQuestion,
    QuestionType.TIMEPICKER.value: TimepickerQuestion,
}


class QuestionMap(BaseModel):
    """
    Type-partitioned question storage shape.

    Unknown keys are kept as-is (open extension point) but are neither
    validated nor projected.
    """

    model_config = ConfigDict(extra="allow")

    comment: List[CommentQuestion] = Field(default_factory=list)
    text: List[TextQuestion] = Field(default_factory=list)
    textarea: List[TextareaQuestion] = Field(default_factory=list)
    checkbox: List[CheckboxQuestion] = Field(default_factory=list)
    checkbox_group: List[CheckboxGroupQuestion] = Field(default_factory=list)
    radiobutton_group: List[RadiobuttonGroupQuestion] = Field(default_factory=list)
    radiobutton_group_horizontal: List[RadiobuttonGroupHorizontalQuestion] = Field(default_factory=list)
    contact_information: List[ContactInformationQuestion] = Field(default_factory=list)
    datepicker: List[DatepickerQuestion] = Field(default_factory=list)
    timepicker: List[TimepickerQuestion] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_ordering(self):
        """Reject forms where two questions claim the same position."""
        counts = Counter(question.ordering for question in self.iter_questions())
        duplicates = sorted(ordering for ordering, count in counts.items() if count > 1)
        if duplicates:
            raise ValueError(f"Duplicate question ordering values: {duplicates}")
        return self

    def iter_questions(self) -> Iterator[QuestionBase]:
        """Yield every known-variant question, grouped by variant."""
        for question_type in QUESTION_MODELS:
            yield from getattr(self, question_type)

    def to_document(self) -> Dict[str, List[Dict[str, Any]]]:
        """Storage shape, containing only the variant keys that were supplied."""
        return self.model_dump(by_alias=True, exclude_unset=True)


QUESTION_SEQUENCE = TypeAdapter(List[Question])


def partition_question_sequence(value: Any) -> Any:
    """
    Accept questions as an ordered list of ``questionType``-tagged records,
    validate each against its variant and group them by variant. Mappings
    (the storage shape) pass through untouched.
    """
    if not isinstance(value, list):
        return value

    grouped: Dict[str, List[QuestionBase]] = {}
    for question in QUESTION_SEQUENCE.validate_python(value):
        grouped.setdefault(question.question_type, []).append(question)

    return grouped
