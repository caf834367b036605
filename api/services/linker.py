# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Maintains the references between contract forms and the agency, business and
worker documents that hold them.

Form documents and owner arrays are updated independently; there is no
transaction spanning both, so a failure between the two steps leaves a
dangling reference behind.
"""

import logging
from typing import Any, Dict, List, Optional
from bson import ObjectId
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from models.enums import OwnerKind
from middleware.error_handler import StoreException
from services.mongodb import (
    MongoDBService,
    AGENCIES_COLLECTION,
    BUSINESSES_COLLECTION,
    WORKERS_COLLECTION,
    OWNER_FORMS_FIELD
)

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

OWNER_COLLECTIONS = {
    OwnerKind.AGENCY: AGENCIES_COLLECTION,
    OwnerKind.BUSINESS: BUSINESSES_COLLECTION,
    OwnerKind.WORKER: WORKERS_COLLECTION,
}

# Kinds that can create forms and therefore receive them on attach.
CREATOR_KINDS = (OwnerKind.AGENCY, OwnerKind.BUSINESS)


def form_id_variants(form_id: Any) -> List[Any]:
    """Values a form id may be stored as inside an owner array."""
    variants: List[Any] = [str(form_id)]
    if ObjectId.is_valid(str(form_id)):
        variants.insert(0, ObjectId(str(form_id)))
    return variants


class FormOwnerLinker:
    """Attach and detach form identifiers on owner documents."""

    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service

    def get_owner(self, owner_kind: OwnerKind, owner_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the owner document for ``owner_id``."""
        return self.mongodb_service.find_by_id(OWNER_COLLECTIONS[OwnerKind(owner_kind)], owner_id)

    def attach(self, owner_kind: OwnerKind, owner_id: str, form_id: str) -> None:
        """
        Add ``form_id`` to the owner's form array with set semantics.

        Raises:
            ValueError: if the owner kind cannot create forms
            StoreException: if the owner is missing or the update did not apply
        """
        owner_kind = OwnerKind(owner_kind)
        if owner_kind not in CREATOR_KINDS:
            raise ValueError(f"Forms cannot be attached to a {owner_kind.value}")

        with tracer.start_as_current_span(
            "linker.attach",
            attributes={
                "form.id": str(form_id),
                "owner.kind": owner_kind.value,
                "owner.id": str(owner_id),
                "db.collection": OWNER_COLLECTIONS[owner_kind],
                "db.operation": "add_to_set"
            }
        ) as span:
            try:
                updated = self.mongodb_service.add_to_set(
                    OWNER_COLLECTIONS[owner_kind],
                    owner_id,
                    OWNER_FORMS_FIELD,
                    ObjectId(str(form_id))
                )
            except ValueError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise StoreException(f"Received no result when updating user: {e}")

            if not updated:
                span.set_status(Status(StatusCode.ERROR, "Owner not found"))
                raise StoreException("Received no result when updating user")

            logger.info(
                "Form attached to owner",
                extra={"form_id": str(form_id), "owner_kind": owner_kind.value, "owner_id": str(owner_id)}
            )

    def detach(self, owner_kind: OwnerKind, owner_id: str, form_id: str) -> bool:
        """
        Remove ``form_id`` from the owner's form array.

        Removing an entry that is not present is not an error.

        Returns:
            True if the owner document exists, False otherwise
        """
        owner_kind = OwnerKind(owner_kind)

        with tracer.start_as_current_span(
            "linker.detach",
            attributes={
                "form.id": str(form_id),
                "owner.kind": owner_kind.value,
                "owner.id": str(owner_id),
                "db.collection": OWNER_COLLECTIONS[owner_kind],
                "db.operation": "pull"
            }
        ):
            if not ObjectId.is_valid(str(owner_id)):
                logger.warning(f"Cannot detach form {form_id} from malformed owner id {owner_id}")
                return False

            matched = self.mongodb_service.pull(
                OWNER_COLLECTIONS[owner_kind],
                owner_id,
                OWNER_FORMS_FIELD,
                form_id_variants(form_id)
            )

            logger.info(
                "Form detached from owner" if matched else "Owner not found while detaching form",
                extra={"form_id": str(form_id), "owner_kind": owner_kind.value, "owner_id": str(owner_id)}
            )
            return matched

    def resolve_counterparty(self, owner_kind: OwnerKind, counterparty_id: str) -> OwnerKind:
        """
        Work out which kind of account sits on the other side of a contract.

        Agencies contract with businesses or workers; businesses and workers
        contract with agencies.
        """
        owner_kind = OwnerKind(owner_kind)
        if owner_kind != OwnerKind.AGENCY:
            return OwnerKind.AGENCY

        if self.mongodb_service.find_by_id(BUSINESSES_COLLECTION, counterparty_id):
            return OwnerKind.BUSINESS
        return OwnerKind.WORKER

    def detach_counterparty(self, owner_kind: OwnerKind, counterparty_id: str, form_id: str) -> OwnerKind:
        """
        Remove ``form_id`` from the other contract party's form array.

        Returns:
            The kind of account the form was detached from
        """
        counterparty_kind = self.resolve_counterparty(owner_kind, counterparty_id)
        self.detach(counterparty_kind, counterparty_id, form_id)
        return counterparty_kind
