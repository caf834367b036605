# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import copy
import pytest
from collections import defaultdict
from typing import Any, Dict, List, Optional
from bson import ObjectId

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['JWT_SECRET'] = 'test-secret-key-for-contract-form-tests'
os.environ['MONGODB_DATABASE'] = 'staffing_forms_test'
os.environ['BASE_URL'] = 'https://api.example.com'

from models.enums import OwnerKind
from services.mongodb import (
    PaginationResult,
    AGENCIES_COLLECTION,
    BUSINESSES_COLLECTION,
    WORKERS_COLLECTION,
    OWNER_FORMS_FIELD
)


class InMemoryMongoDBService:
    """
    Stand-in for ``MongoDBService`` keeping documents in dictionaries.

    Mirrors the service's per-document contract closely enough for service
    and endpoint tests that do not need a running MongoDB.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[ObjectId, Dict[str, Any]]] = defaultdict(dict)

    def _object_id(self, doc_id: Any) -> Optional[ObjectId]:
        if isinstance(doc_id, ObjectId):
            return doc_id
        return ObjectId(str(doc_id)) if ObjectId.is_valid(str(doc_id)) else None

    def seed(self, collection: str, document: Dict[str, Any]) -> ObjectId:
        document = copy.deepcopy(document)
        document.setdefault("_id", ObjectId())
        self.collections[collection][document["_id"]] = document
        return document["_id"]

    def raw(self, collection: str, doc_id: Any) -> Optional[Dict[str, Any]]:
        return self.collections[collection].get(self._object_id(doc_id))

    def insert(self, collection: str, document: Dict) -> str:
        if "_id" not in document:
            document["_id"] = ObjectId()
        self.collections[collection][document["_id"]] = copy.deepcopy(document)
        return str(document["_id"])

    def find_by_id(self, collection: str, doc_id: Any) -> Optional[Dict]:
        document = self.raw(collection, doc_id)
        return copy.deepcopy(document) if document is not None else None

    def replace_by_id(self, collection: str, doc_id: Any, document: Dict) -> Optional[Dict]:
        object_id = self._object_id(doc_id)
        if object_id not in self.collections[collection]:
            return None
        replacement = {key: value for key, value in document.items() if key != "_id"}
        replacement["_id"] = object_id
        self.collections[collection][object_id] = copy.deepcopy(replacement)
        return copy.deepcopy(replacement)

    def delete_by_id(self, collection: str, doc_id: Any) -> Optional[Dict]:
        return self.collections[collection].pop(self._object_id(doc_id), None)

    def add_to_set(self, collection: str, doc_id: Any, field: str, value: Any) -> bool:
        document = self.raw(collection, doc_id)
        if document is None:
            return False
        values = document.setdefault(field, [])
        if value not in values:
            values.append(value)
        return True

    def pull(self, collection: str, doc_id: Any, field: str, values: List[Any]) -> bool:
        document = self.raw(collection, doc_id)
        if document is None:
            return False
        document[field] = [value for value in document.get(field, []) if value not in values]
        return True

    def paginate(self, collection: str, query: Dict, page: int = 1, page_size: int = 20,
                 text_search: Optional[str] = None, **kwargs) -> PaginationResult:
        stored = self.collections[collection]
        items = [copy.deepcopy(stored[doc_id]) for doc_id in query["_id"]["$in"] if doc_id in stored]

        if text_search:
            terms = text_search.lower().split()

            def searchable(document):
                return " ".join(
                    [document.get("title", ""), document.get("description") or ""] + document.get("tags", [])
                ).lower()

            items = [item for item in items if any(term in searchable(item) for term in terms)]

        start = (page - 1) * page_size
        return PaginationResult(items[start:start + page_size], len(items), page, page_size)

    def health_check(self) -> Dict[str, Any]:
        return {
            'status': 'healthy',
            'ping': True,
            'version': '7.0.0',
            'database': 'staffing_forms_test',
            'connection_pool_size': 10
        }


@pytest.fixture
def store():
    """Empty in-memory document store."""
    return InMemoryMongoDBService()


@pytest.fixture
def agency_id(store):
    """Agency X, holding no forms yet."""
    return str(store.seed(AGENCIES_COLLECTION, {"name": "Agency X", OWNER_FORMS_FIELD: []}))


@pytest.fixture
def business_id(store):
    """Business Y, holding no forms yet."""
    return str(store.seed(BUSINESSES_COLLECTION, {"name": "Business Y", OWNER_FORMS_FIELD: []}))


@pytest.fixture
def worker_id(store):
    """Worker Z, holding no forms yet."""
    return str(store.seed(WORKERS_COLLECTION, {"name": "Worker Z", OWNER_FORMS_FIELD: []}))


@pytest.fixture
def flask_app(store, monkeypatch):
    """Application wired to the in-memory store."""
    from app import app
    from services.forms import FormService
    from services.linker import FormOwnerLinker

    monkeypatch.setattr(app, "mongodb_service", store)
    monkeypatch.setattr(app, "form_service", FormService(store, FormOwnerLinker(store)))
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(flask_app):
    """Flask test client."""
    return flask_app.test_client()


@pytest.fixture
def auth_headers(flask_app):
    """Build bearer headers for an owner of the given kind."""
    def build(owner_kind: OwnerKind, owner_id: str) -> Dict[str, str]:
        token = flask_app.auth_service.issue_token(owner_id, owner_kind)
        return {"Authorization": f"Bearer {token}"}
    return build


@pytest.fixture
def sample_text_question():
    """Text question record as sent by clients."""
    return {
        "ordering": 0,
        "title": "Name",
        "optional": False,
        "answerMinLength": 1,
        "answerMaxLength": 50
    }


@pytest.fixture
def sample_form_data(sample_text_question):
    """Contract form creation body."""
    return {
        "title": "Contract A",
        "isPublic": True,
        "filled": False,
        "common": False,
        "questions": {
            "text": [sample_text_question]
        }
    }


@pytest.fixture
def mixed_questions():
    """Question map spanning several variants with orderings 0..4."""
    return {
        "comment": [{"ordering": 2, "title": "Read the terms below"}],
        "text": [{
            "ordering": 0,
            "title": "Name",
            "optional": False,
            "answerMinLength": 1,
            "answerMaxLength": 50
        }],
        "checkbox": [{"ordering": 4, "title": "I agree", "optional": False, "checked": False}],
        "radiobutton_group_horizontal": [{
            "ordering": 1,
            "title": "Satisfaction",
            "optional": True,
            "options": ["Low", "High"],
            "optionValues": [{"value": 1}, {"value": 5}],
            "scale": 5,
            "scaleOptionTitleLeft": "Low",
            "scaleOptionTitleRight": "High"
        }],
        "datepicker": [{"ordering": 3, "title": "Start date", "optional": False, "isClosedTimeFrame": True, "answer": ""}]
    }
