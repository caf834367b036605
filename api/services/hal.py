# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Adds navigation and affordance links to contract form responses and builds
RFC 7807 problem documents.
"""

from typing import Dict, List, Any, Optional
from urllib.parse import urljoin, urlencode
import math

from models.enums import OwnerKind
from models.responses import HalLink, ErrorResponse

FORMS_PATH = "/forms"


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        href = urljoin(self.base_url + '/', path.lstrip('/'))

        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated
        )

    def build_self_link(self, resource_path: str) -> HalLink:
        """Build self link for a resource."""
        return self.build_link(resource_path, title="Self")

    def build_collection_link(self, collection_path: str) -> HalLink:
        """Build link to parent collection."""
        return self.build_link(collection_path, title="Collection")


class PaginationLinkBuilder:
    """Builder for pagination links in HAL collections."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def build_pagination_links(
        self,
        base_path: str,
        current_page: int,
        total_pages: int,
        page_size: int,
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, HalLink]:
        """Build pagination links for a collection."""
        links = {}
        params = {key: value for key, value in (query_params or {}).items() if value is not None}

        def page_link(page: int, title: str) -> HalLink:
            query = urlencode({**params, 'page': page, 'page_size': page_size})
            return self.link_builder.build_link(f"{base_path}?{query}", title=title)

        links['self'] = page_link(current_page, "Current page")

        if current_page > 1:
            links['first'] = page_link(1, "First page")
            links['prev'] = page_link(current_page - 1, "Previous page")

        if current_page < total_pages:
            links['next'] = page_link(current_page + 1, "Next page")
            links['last'] = page_link(total_pages, "Last page")

        return links


class HalResponseBuilder:
    """Main HAL response builder for contract form resources."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)
        self.pagination_builder = PaginationLinkBuilder(base_url)

    def build_form_links(self, form_id: str, owner_kind: Optional[OwnerKind] = None) -> Dict[str, HalLink]:
        """Build navigation and affordance links for a single form."""
        resource_path = f"{FORMS_PATH}/{form_id}"
        links = {
            'self': self.link_builder.build_self_link(resource_path),
            'collection': self.link_builder.build_collection_link(FORMS_PATH),
        }

        if owner_kind is not None:
            links['edit'] = self.link_builder.build_link(
                resource_path,
                method="PUT",
                content_type="application/json",
                title="Replace form"
            )
            links['delete'] = self.link_builder.build_link(
                f"{resource_path}/{{counterpartyId}}",
                method="DELETE",
                title="Delete form",
                templated=True
            )

        return links

    def build_resource_response(
        self,
        data: Dict[str, Any],
        owner_kind: Optional[OwnerKind] = None
    ) -> Dict[str, Any]:
        """Build a HAL resource response for a form representation."""
        response = dict(data)
        links = self.build_form_links(data['id'], owner_kind)
        response['_links'] = {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}
        return response

    def build_collection_response(
        self,
        items: List[Dict[str, Any]],
        total: int,
        page: int,
        page_size: int,
        collection_path: str,
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build a HAL collection response with pagination links."""
        total_pages = math.ceil(total / page_size) if page_size > 0 else 1

        pagination_links = self.pagination_builder.build_pagination_links(
            collection_path,
            page,
            total_pages,
            page_size,
            query_params
        )

        return {
            'total': total,
            'page': page,
            'page_size': page_size,
            'total_pages': total_pages,
            '_links': {rel: link.model_dump(exclude_none=True) for rel, link in pagination_links.items()},
            '_embedded': {
                'forms': items
            }
        }

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response with HAL links."""
        error_response = ErrorResponse(
            type=f"{self.base_url}/problems/{error_type}",
            title=title,
            status=status,
            detail=detail,
            instance=instance,
            errors=validation_errors or None
        ).model_dump(exclude_none=True)

        links = {
            'help': self.link_builder.build_link(
                f"/docs/errors#{error_type}",
                title="Error documentation"
            )
        }

        if error_type == "resource-not-found":
            links['collection'] = self.link_builder.build_collection_link(FORMS_PATH)

        error_response['_links'] = {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}
        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_form(
        self,
        form: Dict[str, Any],
        owner_kind: Optional[OwnerKind] = None
    ) -> Dict[str, Any]:
        """Format a form representation with HAL links."""
        return self.builder.build_resource_response(form, owner_kind)

    def format_form_collection(
        self,
        forms: List[Dict[str, Any]],
        total: int,
        page: int,
        page_size: int,
        owner_kind: Optional[OwnerKind] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Format a page of forms with HAL links."""
        formatted_forms = [self.format_form(form, owner_kind) for form in forms]
        return self.builder.build_collection_response(
            formatted_forms,
            total,
            page,
            page_size,
            FORMS_PATH,
            filters
        )

    def format_validation_error(
        self,
        detail: str,
        instance: str,
        validation_errors: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Format a validation error response."""
        return self.builder.build_error_response(
            "validation-error",
            "Validation Error",
            400,
            detail,
            instance,
            validation_errors
        )

    def format_authentication_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format an authentication error response."""
        return self.builder.build_error_response(
            "authentication-required",
            "Authentication Required",
            401,
            detail,
            instance
        )

    def format_authorization_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format an authorization error response."""
        return self.builder.build_error_response(
            "not-authorized",
            "Not Authorized",
            403,
            detail,
            instance
        )

    def format_not_found_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format a not found error response."""
        return self.builder.build_error_response(
            "resource-not-found",
            "Resource Not Found",
            404,
            detail,
            instance
        )

    def format_server_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format a server error response."""
        return self.builder.build_error_response(
            "internal-server-error",
            "Internal Server Error",
            500,
            detail,
            instance
        )


# Convenience function for creating HAL formatter
def create_hal_formatter(base_url: str) -> HalFormatter:
    """Create a HAL formatter instance."""
    return HalFormatter(base_url)
