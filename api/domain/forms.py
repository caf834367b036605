# SPDX-License-Identifier: Apache-2.0

"""
Contract form domain logic.

Pure functions for building stored form documents from requests and for
projecting the stored, variant-partitioned question map into the linear
sequence clients render.
"""

from typing import Any, Dict, Iterable, List, Optional
from bson import ObjectId

from models.entities import Form
from models.questions import QUESTION_MODELS
from models.requests import CreateFormRequest, UpdateFormRequest

# Fields that keep their stored value when an update leaves them out.
CARRIED_OVER_FIELDS = ("title", "isPublic", "filled", "common")


def build_new_form(request: CreateFormRequest) -> Form:
    """
    Build a new Form entity from a validated creation request.

    Args:
        request: Validated creation request

    Returns:
        Form with a fresh identifier and creation timestamp
    """
    return Form.model_validate(request.model_dump(by_alias=True, exclude_unset=True))


def build_replacement_form(existing: Dict[str, Any], request: UpdateFormRequest) -> Form:
    """
    Build the document that replaces ``existing`` on update.

    Identity and ``createdAt`` always come from the stored document. The title
    and flags are carried over when the request omits them; every other field
    (questions, description, tags) is taken from the request only, so an
    omitted field is cleared.

    Args:
        existing: Stored form document
        request: Validated update request

    Returns:
        Form representing the full replacement document

    Raises:
        pydantic.ValidationError: if the resulting document breaks the schema
    """
    supplied = request.model_dump(by_alias=True, exclude_unset=True)

    data: Dict[str, Any] = {"id": existing["_id"]}
    if existing.get("createdAt") is not None:
        data["createdAt"] = existing["createdAt"]

    for field in CARRIED_OVER_FIELDS:
        if field not in supplied and field in existing:
            data[field] = existing[field]

    data.update(supplied)
    data.setdefault("questions", {})

    return Form.model_validate(data)


def project_questions(questions: Optional[Dict[str, Any]]) -> List[Optional[Dict[str, Any]]]:
    """
    Flatten the variant-partitioned question map into one sequence.

    Each record lands at the index given by its ``ordering`` and is stamped
    with ``questionType`` set to the variant key it came from. Keys outside
    the known variants and records without a usable ordering are skipped.
    When two records share an ordering the one iterated later wins.
    Positions no record claims are ``None``.

    Args:
        questions: Stored question map (may be None or empty)

    Returns:
        Ordering-indexed list of question records
    """
    projected: List[Optional[Dict[str, Any]]] = []
    if not questions:
        return projected

    for question_type, records in questions.items():
        if question_type not in QUESTION_MODELS or not records:
            continue

        for record in records:
            ordering = record.get("ordering")
            if not isinstance(ordering, int) or ordering < 0:
                continue
            if ordering >= len(projected):
                projected.extend([None] * (ordering + 1 - len(projected)))
            projected[ordering] = {**record, "questionType": question_type}

    return projected


def project_form(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the client representation of a stored form with flattened questions.

    All fields other than ``questions`` pass through unchanged; ``_id`` is
    exposed as ``id``.
    """
    projected = serialize_form(document)
    projected["questions"] = project_questions(document.get("questions"))
    return projected


def serialize_form(document: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored form document into its JSON-ready shape."""
    serialized = {key: value for key, value in document.items() if key != "_id"}
    serialized["id"] = str(document["_id"])
    return serialized


def references_form(form_ids: Optional[Iterable[Any]], form_id: str) -> bool:
    """
    Check whether an owner's form array references ``form_id``.

    Arrays may hold ObjectIds or their string form.
    """
    if not form_ids:
        return False
    return any(str(candidate) == str(form_id) for candidate in form_ids)


def to_object_ids(form_ids: Optional[Iterable[Any]]) -> List[ObjectId]:
    """Normalize an owner's form array into ObjectIds, skipping malformed entries."""
    return [ObjectId(str(form_id)) for form_id in form_ids or [] if ObjectId.is_valid(str(form_id))]
