# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Business contract form endpoints.
"""

from flask import request, jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import logging
from typing import Any, Dict
from functools import wraps

from domain.forms import project_form, serialize_form
from models.enums import OwnerKind
from models.entities import UserContext
from models.requests import CreateFormRequest, UpdateFormRequest, FormListParams, FormPath, FormCounterpartyPath
from models.responses import FormResponse, FormResource, FormCollectionResponse, ErrorResponse
from middleware.auth import require_roles
from middleware.error_handler import CustomException, format_exception_response

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

CREATOR_ROLES = (OwnerKind.AGENCY, OwnerKind.BUSINESS)
ALL_ROLES = (OwnerKind.AGENCY, OwnerKind.BUSINESS, OwnerKind.WORKER)


def require_form_roles(*kinds: OwnerKind):
    """Role requirement decorator bound to the app's auth middleware at request time."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            return require_roles(current_app.auth_middleware, *kinds)(f)(*args, **kwargs)
        return decorated_function
    return decorator


def form_representation(data: Dict[str, Any], owner_kind: OwnerKind) -> Dict[str, Any]:
    """Camel-cased form body with HAL links."""
    return current_app.hal_formatter.format_form(FormResponse.model_validate(data).to_json(), owner_kind)


def problem_response(span, error: CustomException):
    span.set_status(Status(StatusCode.ERROR, error.message))
    return jsonify(format_exception_response(current_app.hal_formatter, error, request.path)), error.status_code


def server_error_response(span, error: Exception, detail: str):
    span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, str(error)))

    if current_app.config.get('ENVIRONMENT') != 'production' and str(error):
        detail = f"{detail}: {error}"

    return jsonify(current_app.hal_formatter.format_server_error(detail, request.path)), 500


forms_tag = Tag(name="BusinessContractForms", description="Business contract form management")
forms_bp = APIBlueprint(
    'forms',
    __name__,
    url_prefix='/forms',
    abp_tags=[forms_tag],
    abp_security=[{"jwt": []}],
    abp_responses={400: ErrorResponse, 401: ErrorResponse, 403: ErrorResponse, 500: ErrorResponse}
)


@forms_bp.post('', responses={200: FormResource})
@require_form_roles(*CREATOR_ROLES)
def create_form(user_context: UserContext, body: CreateFormRequest):
    """
    Create a contract form.

    The new form is attached to the calling agency's or business's form array.
    """
    with tracer.start_as_current_span(
        "forms.create",
        attributes={
            "operation": "create_form",
            "owner.id": user_context.user_id,
            "owner.kind": user_context.owner_kind.value
        }
    ) as span:
        try:
            document = current_app.form_service.create(body, user_context)
            span.set_attribute("form.id", str(document["_id"]))
            span.set_status(Status(StatusCode.OK))
            return jsonify(form_representation(serialize_form(document), user_context.owner_kind)), 200

        except CustomException as e:
            return problem_response(span, e)

        except Exception as e:
            logger.error(
                "Failed to create business contract form",
                extra={
                    "owner_id": user_context.user_id,
                    "owner_kind": user_context.owner_kind.value,
                    "error": str(e)
                },
                exc_info=True
            )
            return server_error_response(span, e, "Failed to create business contract form")


@forms_bp.get('/<string:form_id>', responses={200: FormResource, 404: ErrorResponse})
@require_form_roles(*ALL_ROLES)
def get_form(user_context: UserContext, path: FormPath):
    """
    Fetch a contract form with its questions as one ordering-indexed list.
    """
    form_id = path.form_id
    with tracer.start_as_current_span(
        "forms.get",
        attributes={
            "operation": "get_form",
            "form.id": form_id,
            "owner.id": user_context.user_id,
            "owner.kind": user_context.owner_kind.value
        }
    ) as span:
        try:
            projected = current_app.form_service.get_projected(form_id)
            span.set_attribute("form.question_slots", len(projected["questions"]))
            span.set_status(Status(StatusCode.OK))
            return jsonify(form_representation(projected, user_context.owner_kind)), 200

        except CustomException as e:
            return problem_response(span, e)

        except Exception as e:
            logger.error(
                "Failed to get business contract form",
                extra={"form_id": form_id, "owner_id": user_context.user_id, "error": str(e)},
                exc_info=True
            )
            return server_error_response(span, e, "Failed to get business contract form")


@forms_bp.put('/<string:form_id>', responses={200: FormResource, 404: ErrorResponse})
@require_form_roles(*ALL_ROLES)
def update_form(user_context: UserContext, path: FormPath, body: UpdateFormRequest):
    """
    Replace a contract form.

    Send the complete question set: questions, description and tags that are
    left out are cleared.
    """
    form_id = path.form_id
    with tracer.start_as_current_span(
        "forms.update",
        attributes={
            "operation": "update_form",
            "form.id": form_id,
            "owner.id": user_context.user_id,
            "owner.kind": user_context.owner_kind.value
        }
    ) as span:
        try:
            document = current_app.form_service.update(form_id, body)
            span.set_status(Status(StatusCode.OK))
            return jsonify(form_representation(serialize_form(document), user_context.owner_kind)), 200

        except CustomException as e:
            return problem_response(span, e)

        except Exception as e:
            logger.error(
                "Failed to update business contract form",
                extra={"form_id": form_id, "owner_id": user_context.user_id, "error": str(e)},
                exc_info=True
            )
            return server_error_response(span, e, "Failed to update business contract form")


@forms_bp.delete('/<string:form_id>/<string:counterparty_id>', responses={204: None, 404: ErrorResponse})
@require_form_roles(*ALL_ROLES)
def delete_form(user_context: UserContext, path: FormCounterpartyPath):
    """
    Delete a contract form held by the caller.

    The form is also detached from the counterparty identified in the path.
    """
    form_id, counterparty_id = path.form_id, path.counterparty_id
    with tracer.start_as_current_span(
        "forms.delete",
        attributes={
            "operation": "delete_form",
            "form.id": form_id,
            "counterparty.id": counterparty_id,
            "owner.id": user_context.user_id,
            "owner.kind": user_context.owner_kind.value
        }
    ) as span:
        try:
            current_app.form_service.delete(form_id, user_context, counterparty_id)
            span.set_status(Status(StatusCode.OK))
            return '', 204

        except CustomException as e:
            return problem_response(span, e)

        except Exception as e:
            logger.error(
                "Failed to delete business contract form",
                extra={
                    "form_id": form_id,
                    "counterparty_id": counterparty_id,
                    "owner_id": user_context.user_id,
                    "error": str(e)
                },
                exc_info=True
            )
            return server_error_response(span, e, "Failed to delete business contract form")


@forms_bp.get('', responses={200: FormCollectionResponse})
@require_form_roles(*ALL_ROLES)
def list_forms(user_context: UserContext, query: FormListParams):
    """
    List the forms held by the caller, optionally filtered by full-text search.
    """
    with tracer.start_as_current_span(
        "forms.list",
        attributes={
            "operation": "list_forms",
            "owner.id": user_context.user_id,
            "owner.kind": user_context.owner_kind.value,
            "pagination.page": query.page,
            "pagination.page_size": query.page_size
        }
    ) as span:
        try:
            result = current_app.form_service.list(user_context, query)
            forms = [FormResponse.model_validate(project_form(item)).to_json() for item in result.items]

            span.set_attributes({
                "pagination.total": result.total,
                "pagination.returned": len(forms)
            })
            span.set_status(Status(StatusCode.OK))

            return jsonify(current_app.hal_formatter.format_form_collection(
                forms,
                result.total,
                result.page,
                result.page_size,
                user_context.owner_kind,
                {"search": query.search}
            )), 200

        except CustomException as e:
            return problem_response(span, e)

        except Exception as e:
            logger.error(
                "Failed to list business contract forms",
                extra={"owner_id": user_context.user_id, "error": str(e)},
                exc_info=True
            )
            return server_error_response(span, e, "Failed to list business contract forms")
