# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Contract form store: create, fetch, replace, delete and list forms.
"""

import logging
from typing import Any, Dict, Optional
from pydantic import ValidationError
from opentelemetry import trace

from domain.forms import (
    build_new_form,
    build_replacement_form,
    project_form,
    references_form,
    to_object_ids
)
from middleware.error_handler import (
    AuthorizationException,
    NotFoundException,
    StoreException,
    ValidationException
)
from middleware.validation import format_validation_errors
from models.entities import UserContext
from models.enums import OwnerKind
from models.requests import CreateFormRequest, UpdateFormRequest, FormListParams
from services.linker import FormOwnerLinker, CREATOR_KINDS
from services.mongodb import MongoDBService, PaginationResult, FORMS_COLLECTION, OWNER_FORMS_FIELD

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class FormService:
    """Persistence operations for business contract forms."""

    def __init__(self, mongodb_service: MongoDBService, linker: Optional[FormOwnerLinker] = None):
        self.mongodb_service = mongodb_service
        self.linker = linker or FormOwnerLinker(mongodb_service)

    def create(self, request: CreateFormRequest, user_context: UserContext) -> Dict[str, Any]:
        """
        Persist a new form and attach it to the creating agency or business.

        Args:
            request: Validated creation request
            user_context: Authenticated creator

        Returns:
            The stored form document
        """
        owner_kind = OwnerKind(user_context.owner_kind)
        if owner_kind not in CREATOR_KINDS:
            raise AuthorizationException("Only agencies and businesses can create forms")

        with tracer.start_as_current_span(
            "forms.store.create",
            attributes={
                "owner.kind": owner_kind.value,
                "owner.id": user_context.user_id,
                "db.collection": FORMS_COLLECTION,
                "db.operation": "insert"
            }
        ) as span:
            form = build_new_form(request)
            document = form.to_document()
            span.set_attribute("form.id", form.id)

            self.mongodb_service.insert(FORMS_COLLECTION, document)
            self.linker.attach(owner_kind, user_context.user_id, form.id)

            logger.info(
                "Form created",
                extra={
                    "form_id": form.id,
                    "owner_kind": owner_kind.value,
                    "owner_id": user_context.user_id
                }
            )
            return document

    def get(self, form_id: str) -> Dict[str, Any]:
        """
        Fetch a stored form document.

        Raises:
            NotFoundException: if no form has this ID
        """
        with tracer.start_as_current_span(
            "forms.store.get",
            attributes={"form.id": form_id, "db.collection": FORMS_COLLECTION, "db.operation": "find_one"}
        ) as span:
            document = self.mongodb_service.find_by_id(FORMS_COLLECTION, form_id)
            span.set_attribute("db.found", document is not None)

            if document is None:
                raise NotFoundException(f"Could not find business contract form with ID {form_id}")
            return document

    def get_projected(self, form_id: str) -> Dict[str, Any]:
        """Fetch a form with its questions flattened into one ordered sequence."""
        return project_form(self.get(form_id))

    def update(self, form_id: str, request: UpdateFormRequest) -> Dict[str, Any]:
        """
        Replace a stored form with the supplied content.

        Questions, description and tags that the request leaves out are
        cleared; see ``build_replacement_form``.

        Raises:
            NotFoundException: if no form has this ID
            ValidationException: if the replacement breaks the form schema
            StoreException: if the store returned no result
        """
        existing = self.get(form_id)

        with tracer.start_as_current_span(
            "forms.store.update",
            attributes={"form.id": form_id, "db.collection": FORMS_COLLECTION, "db.operation": "replace"}
        ):
            try:
                form = build_replacement_form(existing, request)
            except ValidationError as e:
                raise ValidationException(
                    f"Updated business contract form {form_id} is invalid",
                    format_validation_errors(e)
                )

            result = self.mongodb_service.replace_by_id(FORMS_COLLECTION, form_id, form.to_document())
            if result is None:
                raise StoreException("Didn't get a result from database while updating business contract form")

            logger.info(
                "Form replaced",
                extra={"form_id": form_id, "fields": sorted(request.model_fields_set)}
            )
            return result

    def delete(self, form_id: str, user_context: UserContext, counterparty_id: str) -> None:
        """
        Delete a form held by the caller and detach it from both contract parties.

        Args:
            form_id: Form to delete
            user_context: Authenticated caller; their form array must hold ``form_id``
            counterparty_id: The other party of the declined contract

        Raises:
            AuthorizationException: if the caller does not hold the form
            NotFoundException: if the form document no longer exists
            StoreException: if the store returned no result
        """
        owner_kind = OwnerKind(user_context.owner_kind)

        with tracer.start_as_current_span(
            "forms.store.delete",
            attributes={
                "form.id": form_id,
                "owner.kind": owner_kind.value,
                "owner.id": user_context.user_id,
                "counterparty.id": counterparty_id,
                "db.collection": FORMS_COLLECTION,
                "db.operation": "delete"
            }
        ):
            owner = self.linker.get_owner(owner_kind, user_context.user_id)
            if owner is None or not references_form(owner.get(OWNER_FORMS_FIELD), form_id):
                logger.warning(
                    "Form delete refused: caller does not hold form",
                    extra={"form_id": form_id, "owner_kind": owner_kind.value, "owner_id": user_context.user_id}
                )
                raise AuthorizationException("You are not authorized to delete this business contract form")

            deleted = self.mongodb_service.delete_by_id(FORMS_COLLECTION, form_id)
            if deleted is None:
                # Drop the dangling reference before reporting the missing form
                self.linker.detach(owner_kind, user_context.user_id, form_id)
                raise NotFoundException(f"Could not find business contract form with ID {form_id}")

            if not self.linker.detach(owner_kind, user_context.user_id, form_id):
                raise StoreException(
                    "Did not receive any result from database when deleting business contract form's id from array"
                )

            counterparty_kind = self.linker.detach_counterparty(owner_kind, counterparty_id, form_id)

            logger.info(
                "Form deleted",
                extra={
                    "form_id": form_id,
                    "owner_kind": owner_kind.value,
                    "owner_id": user_context.user_id,
                    "counterparty_kind": counterparty_kind.value,
                    "counterparty_id": counterparty_id
                }
            )

    def list(self, user_context: UserContext, params: FormListParams) -> PaginationResult:
        """
        Page through the forms the caller holds, optionally full-text searched.
        """
        owner_kind = OwnerKind(user_context.owner_kind)

        with tracer.start_as_current_span(
            "forms.store.list",
            attributes={
                "owner.kind": owner_kind.value,
                "owner.id": user_context.user_id,
                "db.collection": FORMS_COLLECTION,
                "db.operation": "paginate"
            }
        ) as span:
            owner = self.linker.get_owner(owner_kind, user_context.user_id)
            form_ids = to_object_ids(owner.get(OWNER_FORMS_FIELD)) if owner else []
            span.set_attribute("owner.form_count", len(form_ids))

            if not form_ids:
                return PaginationResult([], 0, params.page, params.page_size)

            return self.mongodb_service.paginate(
                FORMS_COLLECTION,
                {"_id": {"$in": form_ids}},
                page=params.page,
                page_size=params.page_size,
                text_search=params.search
            )
