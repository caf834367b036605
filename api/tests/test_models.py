# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for Pydantic models.
"""

import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError
from bson import ObjectId

from models.entities import Form, UserContext
from models.enums import OwnerKind, QuestionType
from models.questions import (
    QuestionMap,
    TextQuestion,
    TextareaQuestion,
    RadiobuttonGroupHorizontalQuestion,
    DatepickerQuestion,
    TimepickerQuestion,
    CheckboxGroupQuestion,
    QUESTION_MODELS
)
from models.requests import CreateFormRequest, UpdateFormRequest, FormListParams


class TestQuestionVariants:
    """Test question variant validation."""

    def test_variant_table_covers_every_question_type(self):
        """Every question type has exactly one model."""
        assert set(QUESTION_MODELS) == {question_type.value for question_type in QuestionType}

    def test_ordering_upper_boundary_accepted(self, sample_text_question):
        """Ordering 99 is the last valid position."""
        question = TextQuestion(**{**sample_text_question, "ordering": 99})
        assert question.ordering == 99

    def test_ordering_above_range_rejected(self, sample_text_question):
        """Ordering 100 is out of range."""
        with pytest.raises(ValidationError) as exc_info:
            TextQuestion(**{**sample_text_question, "ordering": 100})

        assert "ordering" in str(exc_info.value)

    def test_negative_ordering_rejected(self):
        with pytest.raises(ValidationError):
            QuestionMap(comment=[{"ordering": -1, "title": "Intro"}])

    def test_title_length_limit(self, sample_text_question):
        """Question titles allow up to 1000 characters."""
        TextQuestion(**{**sample_text_question, "title": "x" * 1000})

        with pytest.raises(ValidationError):
            TextQuestion(**{**sample_text_question, "title": "x" * 1001})

    def test_text_question_requires_length_bounds(self):
        with pytest.raises(ValidationError) as exc_info:
            TextQuestion(ordering=0, title="Name", optional=False)

        errors = {error["loc"][0] for error in exc_info.value.errors()}
        assert {"answerMinLength", "answerMaxLength"} <= errors

    def test_camel_case_aliases(self, sample_text_question):
        """Fields accept camelCase input and dump camelCase keys."""
        question = TextQuestion(**sample_text_question)

        assert question.answer_min_length == 1
        assert question.model_dump(by_alias=True, exclude_unset=True) == sample_text_question

    def test_textarea_rows_range(self, sample_text_question):
        TextareaQuestion(**sample_text_question, rows=50)

        with pytest.raises(ValidationError):
            TextareaQuestion(**sample_text_question, rows=51)

    def test_option_length_limit(self):
        with pytest.raises(ValidationError):
            CheckboxGroupQuestion(ordering=0, title="Pick", optional=True, options=["x" * 501])

    def test_horizontal_scale_required(self):
        """Horizontal radio groups need a scale."""
        with pytest.raises(ValidationError):
            RadiobuttonGroupHorizontalQuestion(ordering=0, title="Rate", optional=True)

    def test_horizontal_scale_titles_length(self):
        with pytest.raises(ValidationError):
            RadiobuttonGroupHorizontalQuestion(
                ordering=0, title="Rate", optional=True, scale=5, scaleOptionTitleLeft="x" * 76
            )

    def test_datepicker_title_limit(self):
        """Date pickers keep a shorter title."""
        DatepickerQuestion(ordering=0, title="x" * 200, optional=True)

        with pytest.raises(ValidationError):
            DatepickerQuestion(ordering=0, title="x" * 201, optional=True)

    @pytest.mark.parametrize("model", [DatepickerQuestion, TimepickerQuestion])
    def test_picker_optional_required(self, model):
        with pytest.raises(ValidationError) as exc_info:
            model(ordering=0, title="Start")

        assert exc_info.value.errors()[0]["loc"] == ("optional",)


class TestQuestionMap:
    """Test the type-partitioned question map."""

    def test_mixed_variants(self, mixed_questions):
        questions = QuestionMap.model_validate(mixed_questions)

        assert sorted(question.ordering for question in questions.iter_questions()) == [0, 1, 2, 3, 4]

    def test_question_type_tag_not_stored(self, mixed_questions):
        document = QuestionMap.model_validate(mixed_questions).to_document()

        assert set(document) == set(mixed_questions)
        for records in document.values():
            for record in records:
                assert "questionType" not in record

    def test_duplicate_ordering_across_variants_rejected(self, sample_text_question):
        with pytest.raises(ValidationError) as exc_info:
            QuestionMap.model_validate({
                "text": [sample_text_question],
                "comment": [{"ordering": 0, "title": "Intro"}]
            })

        assert "Duplicate question ordering values: [0]" in str(exc_info.value)

    def test_duplicate_ordering_within_variant_rejected(self):
        with pytest.raises(ValidationError):
            QuestionMap.model_validate({
                "comment": [{"ordering": 3, "title": "A"}, {"ordering": 3, "title": "B"}]
            })

    def test_unknown_variant_key_kept(self):
        """Unknown keys pass through uninterpreted."""
        questions = QuestionMap.model_validate({"slider": [{"ordering": 0, "whatever": True}]})

        assert questions.to_document() == {"slider": [{"ordering": 0, "whatever": True}]}
        assert list(questions.iter_questions()) == []


class TestFormModel:
    """Test Form model validation."""

    def test_valid_form(self, sample_form_data):
        form = Form.model_validate(sample_form_data)

        assert form.title == "Contract A"
        assert form.is_public is True
        assert ObjectId.is_valid(form.id)
        assert isinstance(form.created_at, datetime)
        assert form.created_at.microsecond % 1000 == 0

    def test_created_at_is_naive_utc(self, sample_form_data):
        """Timestamps are stored the way BSON dates read back: naive UTC."""
        form = Form.model_validate(sample_form_data)
        now = datetime.now(timezone.utc).replace(tzinfo=None)

        assert form.created_at.tzinfo is None
        assert abs(now - form.created_at) < timedelta(seconds=5)

    def test_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            Form.model_validate({"title": "Contract A"})

        missing = {error["loc"][0] for error in exc_info.value.errors() if error["type"] == "missing"}
        assert missing == {"isPublic", "filled", "common"}

    def test_title_length_limit(self, sample_form_data):
        with pytest.raises(ValidationError):
            Form.model_validate({**sample_form_data, "title": "x" * 1001})

    def test_description_length_limit(self, sample_form_data):
        with pytest.raises(ValidationError):
            Form.model_validate({**sample_form_data, "description": "x" * 1001})

    def test_tag_length_limit(self, sample_form_data):
        Form.model_validate({**sample_form_data, "tags": ["x" * 20]})

        with pytest.raises(ValidationError):
            Form.model_validate({**sample_form_data, "tags": ["x" * 21]})

    def test_null_questions_become_empty(self, sample_form_data):
        form = Form.model_validate({**sample_form_data, "questions": None})

        assert form.to_document()["questions"] == {}

    def test_question_list_input(self, sample_text_question):
        """An ordered list of tagged questions is grouped by variant."""
        form = Form.model_validate({
            "title": "Contract B",
            "isPublic": False,
            "filled": False,
            "common": True,
            "questions": [
                {**sample_text_question, "questionType": "text"},
                {"questionType": "comment", "ordering": 1, "title": "Thanks"}
            ]
        })

        assert form.to_document()["questions"] == {
            "text": [sample_text_question],
            "comment": [{"ordering": 1, "title": "Thanks"}]
        }

    def test_question_list_unknown_type_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Form.model_validate({
                "title": "Contract B",
                "isPublic": False,
                "filled": False,
                "common": False,
                "questions": [{"questionType": "slider", "ordering": 0, "title": "?"}]
            })

        assert "does not match any of the expected tags" in str(exc_info.value)

    def test_question_list_validated_per_variant(self, sample_text_question):
        """A tagged record is checked against the model its tag names."""
        with pytest.raises(ValidationError) as exc_info:
            Form.model_validate({
                "title": "Contract B",
                "isPublic": False,
                "filled": False,
                "common": False,
                "questions": [
                    {**sample_text_question, "questionType": "text"},
                    {"questionType": "textarea", "ordering": 1, "title": "Notes", "optional": True,
                     "answerMinLength": 0, "answerMaxLength": 500}
                ]
            })

        assert "rows" in str(exc_info.value)

    def test_question_list_duplicate_orderings_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Form.model_validate({
                "title": "Contract B",
                "isPublic": False,
                "filled": False,
                "common": False,
                "questions": [
                    {"questionType": "comment", "ordering": 0, "title": "Intro"},
                    {"questionType": "timepicker", "ordering": 0, "title": "Start", "optional": False}
                ]
            })

        assert "Duplicate question ordering values: [0]" in str(exc_info.value)

    def test_to_document_shape(self, sample_form_data, sample_text_question):
        form = Form.model_validate(sample_form_data)
        document = form.to_document()

        assert isinstance(document["_id"], ObjectId)
        assert str(document["_id"]) == form.id
        assert document["createdAt"] == form.created_at
        assert document["isPublic"] is True
        assert document["questions"] == {"text": [sample_text_question]}
        assert "description" not in document
        assert "id" not in document

    def test_from_document(self, sample_form_data):
        document = Form.model_validate(sample_form_data).to_document()

        restored = Form.from_document(document)

        assert restored.id == str(document["_id"])
        assert restored.created_at == document["createdAt"]

    def test_invalid_identifier_rejected(self, sample_form_data):
        with pytest.raises(ValidationError):
            Form.model_validate({**sample_form_data, "id": "not-an-object-id"})


class TestRequestModels:
    """Test request model validation."""

    def test_create_request_matches_form_rules(self, sample_form_data):
        request = CreateFormRequest.model_validate(sample_form_data)

        assert request.model_dump(by_alias=True, exclude_unset=True)["title"] == "Contract A"

        with pytest.raises(ValidationError):
            CreateFormRequest.model_validate({**sample_form_data, "filled": None})

    def test_update_request_allows_omitting_everything(self):
        request = UpdateFormRequest.model_validate({})

        assert request.model_fields_set == set()

    def test_update_request_rejects_null_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            UpdateFormRequest.model_validate({"title": None})

        assert "title cannot be null" in str(exc_info.value)

    def test_update_request_validates_questions(self, sample_text_question):
        with pytest.raises(ValidationError):
            UpdateFormRequest.model_validate({
                "questions": {"text": [{**sample_text_question, "ordering": 100}]}
            })

    def test_list_params_defaults(self):
        params = FormListParams.model_validate({})

        assert params.page == 1
        assert params.page_size == 20
        assert params.search is None

    def test_list_params_blank_search(self):
        assert FormListParams.model_validate({"search": "   "}).search is None
        assert FormListParams.model_validate({"search": " welder "}).search == "welder"

    def test_list_params_page_size_limit(self):
        with pytest.raises(ValidationError):
            FormListParams.model_validate({"page_size": "101"})


class TestUserContext:
    def test_is_any(self):
        context = UserContext(user_id=str(ObjectId()), owner_kind=OwnerKind.BUSINESS)

        assert context.is_any(OwnerKind.AGENCY, OwnerKind.BUSINESS)
        assert not context.is_any(OwnerKind.WORKER)
