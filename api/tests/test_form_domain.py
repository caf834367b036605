# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for contract form domain logic: building documents and projecting questions.
"""

import random
import pytest
from datetime import datetime
from pydantic import ValidationError
from bson import ObjectId

from domain.forms import (
    build_new_form,
    build_replacement_form,
    project_questions,
    project_form,
    serialize_form,
    references_form,
    to_object_ids
)
from models.questions import QUESTION_MODELS
from models.requests import CreateFormRequest, UpdateFormRequest

VARIANTS = list(QUESTION_MODELS)


def spread_questions(count, assign):
    """Question map with orderings 0..count-1, each placed in the variant ``assign`` picks."""
    questions, variants = {}, []
    for ordering in range(count):
        variant = assign(ordering)
        questions.setdefault(variant, []).insert(0, {"ordering": ordering, "title": f"Question {ordering}"})
        variants.append(variant)
    return questions, variants


@pytest.fixture
def stored_form(sample_form_data):
    """Stored document for the sample form."""
    return build_new_form(CreateFormRequest.model_validate(
        {**sample_form_data, "description": "Seasonal staff", "tags": ["seasonal"]}
    )).to_document()


class TestProjectQuestions:
    """Test flattening of the variant-partitioned question map."""

    def test_dense_orderings_project_in_place(self, mixed_questions):
        projected = project_questions(mixed_questions)

        assert len(projected) == 5
        for index, record in enumerate(projected):
            assert record["ordering"] == index
            assert record["questionType"] in QUESTION_MODELS

    @pytest.mark.parametrize("count,assign", [
        (1, lambda ordering: "text"),
        (10, lambda ordering: VARIANTS[ordering % len(VARIANTS)]),
        (100, lambda ordering: VARIANTS[-1 - ordering % len(VARIANTS)]),
        (100, lambda ordering: "comment" if ordering < 50 else "checkbox_group"),
        (100, lambda ordering: random.Random(ordering).choice(VARIANTS)),
    ], ids=["single", "round-robin", "reverse-round-robin", "two-blocks", "scattered"])
    def test_dense_orderings_any_spread(self, count, assign):
        """Every position 0..N-1 is filled by the record that claims it, whatever its variant."""
        questions, variants = spread_questions(count, assign)

        projected = project_questions(questions)

        assert len(projected) == count
        for index, record in enumerate(projected):
            assert record["ordering"] == index
            assert record["title"] == f"Question {index}"
            assert record["questionType"] == variants[index]

    def test_records_tagged_with_source_variant(self, mixed_questions):
        projected = project_questions(mixed_questions)

        assert [record["questionType"] for record in projected] == [
            "text", "radiobutton_group_horizontal", "comment", "datepicker", "checkbox"
        ]

    def test_round_trip_preserves_records(self, mixed_questions):
        """Projected records minus their tag equal the supplied records."""
        projected = project_questions(mixed_questions)

        for record in projected:
            variant = record["questionType"]
            untagged = {key: value for key, value in record.items() if key != "questionType"}
            assert untagged in mixed_questions[variant]

    def test_does_not_mutate_stored_records(self, mixed_questions):
        project_questions(mixed_questions)

        assert "questionType" not in mixed_questions["text"][0]

    def test_sparse_orderings_leave_holes(self):
        projected = project_questions({"comment": [{"ordering": 2, "title": "Late"}]})

        assert projected == [None, None, {"ordering": 2, "title": "Late", "questionType": "comment"}]

    def test_empty_and_missing_questions(self):
        assert project_questions({}) == []
        assert project_questions(None) == []
        assert project_questions({"text": []}) == []

    def test_unknown_variant_not_projected(self):
        projected = project_questions({
            "slider": [{"ordering": 0, "title": "?"}],
            "comment": [{"ordering": 1, "title": "Known"}]
        })

        assert projected == [None, {"ordering": 1, "title": "Known", "questionType": "comment"}]

    def test_unusable_orderings_skipped(self):
        projected = project_questions({
            "comment": [{"title": "No ordering"}, {"ordering": -1, "title": "Negative"}, {"ordering": 0, "title": "Ok"}]
        })

        assert projected == [{"ordering": 0, "title": "Ok", "questionType": "comment"}]

    def test_duplicate_ordering_last_variant_wins(self):
        """Legacy documents with clashing orderings keep the later variant."""
        projected = project_questions({
            "comment": [{"ordering": 0, "title": "First"}],
            "checkbox": [{"ordering": 0, "title": "Second", "optional": True}]
        })

        assert projected == [{"ordering": 0, "title": "Second", "optional": True, "questionType": "checkbox"}]


class TestProjectForm:
    def test_scenario_fetch_shape(self, stored_form):
        """Fetching the sample form yields one tagged text question."""
        projected = project_form(stored_form)

        assert projected["questions"] == [{
            "ordering": 0,
            "title": "Name",
            "optional": False,
            "answerMinLength": 1,
            "answerMaxLength": 50,
            "questionType": "text"
        }]

    def test_other_fields_pass_through(self, stored_form):
        projected = project_form(stored_form)

        assert projected["id"] == str(stored_form["_id"])
        assert "_id" not in projected
        assert projected["title"] == "Contract A"
        assert projected["description"] == "Seasonal staff"
        assert projected["tags"] == ["seasonal"]
        assert projected["createdAt"] == stored_form["createdAt"]

    def test_serialize_keeps_question_map(self, stored_form):
        serialized = serialize_form(stored_form)

        assert serialized["questions"] == stored_form["questions"]
        assert serialized["id"] == str(stored_form["_id"])


class TestBuildForms:
    def test_build_new_form(self, sample_form_data):
        form = build_new_form(CreateFormRequest.model_validate(sample_form_data))

        assert ObjectId.is_valid(form.id)
        assert isinstance(form.created_at, datetime)
        assert form.questions.text[0].title == "Name"

    def test_replacement_drops_omitted_questions(self, stored_form):
        """Sending only a title clears the question set."""
        replacement = build_replacement_form(
            stored_form,
            UpdateFormRequest.model_validate({"title": "Contract A2"})
        ).to_document()

        assert replacement["title"] == "Contract A2"
        assert replacement["questions"] == {}
        assert "description" not in replacement
        assert "tags" not in replacement

    def test_replacement_carries_over_required_fields(self, stored_form):
        replacement = build_replacement_form(
            stored_form,
            UpdateFormRequest.model_validate({"filled": True})
        ).to_document()

        assert replacement["title"] == "Contract A"
        assert replacement["isPublic"] is True
        assert replacement["filled"] is True
        assert replacement["common"] is False

    def test_replacement_keeps_identity_and_creation_time(self, stored_form):
        replacement = build_replacement_form(
            stored_form,
            UpdateFormRequest.model_validate({"title": "Contract A2", "createdAt": "2001-01-01T00:00:00"})
        ).to_document()

        assert replacement["_id"] == stored_form["_id"]
        assert replacement["createdAt"] == stored_form["createdAt"]

    def test_replacement_rejects_duplicate_orderings(self, stored_form, sample_text_question):
        with pytest.raises(ValidationError):
            UpdateFormRequest.model_validate({
                "questions": {
                    "text": [sample_text_question],
                    "comment": [{"ordering": 0, "title": "Clash"}]
                }
            })

    def test_replacement_of_legacy_document_missing_flags(self, stored_form):
        """Stored documents lacking a required flag need it in the update."""
        legacy = {key: value for key, value in stored_form.items() if key != "common"}

        with pytest.raises(ValidationError):
            build_replacement_form(legacy, UpdateFormRequest.model_validate({"title": "Contract A3"}))

        replacement = build_replacement_form(
            legacy,
            UpdateFormRequest.model_validate({"title": "Contract A3", "common": True})
        )
        assert replacement.common is True


class TestOwnerReferences:
    def test_references_form_accepts_both_id_forms(self):
        form_id = ObjectId()

        assert references_form([form_id], str(form_id))
        assert references_form([str(form_id)], str(form_id))
        assert not references_form([ObjectId()], str(form_id))
        assert not references_form(None, str(form_id))
        assert not references_form([], str(form_id))

    def test_to_object_ids_skips_malformed(self):
        form_id = ObjectId()

        assert to_object_ids([form_id, str(form_id), "junk"]) == [form_id, form_id]
        assert to_object_ids(None) == []
