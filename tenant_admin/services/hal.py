# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Adds ``_links`` to resources and collections and builds RFC 7807 problem
documents for errors.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode, urljoin

from ..models.responses import HalLink


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/') + '/'

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False
    ) -> HalLink:
        href = urljoin(self.base_url, path.lstrip('/'))
        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated or None
        )

    def build_self_link(self, resource_path: str) -> HalLink:
        return self.build_link(resource_path, title="Self")

    def build_collection_link(self, collection_path: str) -> HalLink:
        return self.build_link(collection_path, title="Collection")

    def build_action_link(
        self,
        resource_path: str,
        action: str,
        method: str = "POST",
        title: Optional[str] = None
    ) -> HalLink:
        """Build action link for a resource."""
        action_path = f"{resource_path}/{action}" if action else resource_path
        return self.build_link(
            action_path,
            method=method,
            content_type="application/json",
            title=title or action.title()
        )


class PaginationLinkBuilder:
    """Offset-based pagination links for HAL collections."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def _page_link(self, base_path: str, params: Dict[str, Any], limit: int, offset: int, title: str) -> HalLink:
        query = urlencode({**params, 'limit': limit, 'offset': offset})
        return self.link_builder.build_link(f"{base_path}?{query}", title=title)

    def build_pagination_links(
        self,
        base_path: str,
        total: int,
        limit: int,
        offset: int,
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, HalLink]:
        params = {key: value for key, value in (query_params or {}).items() if value is not None}
        links = {'self': self._page_link(base_path, params, limit, offset, "Current page")}

        if offset > 0:
            links['first'] = self._page_link(base_path, params, limit, 0, "First page")
            links['prev'] = self._page_link(base_path, params, limit, max(offset - limit, 0), "Previous page")

        if offset + limit < total:
            links['next'] = self._page_link(base_path, params, limit, offset + limit, "Next page")
            last_offset = ((total - 1) // limit) * limit
            links['last'] = self._page_link(base_path, params, limit, last_offset, "Last page")

        return links


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)
        self.pagination_builder = PaginationLinkBuilder(base_url)

    @staticmethod
    def _dump(links: Dict[str, HalLink]) -> Dict[str, Dict[str, Any]]:
        return {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}

    def format_resource(
        self,
        data: Dict[str, Any],
        resource_path: str,
        collection_path: Optional[str] = None,
        actions: Optional[Dict[str, HalLink]] = None
    ) -> Dict[str, Any]:
        """Attach ``self``, ``collection`` and action links to a resource."""
        links = {'self': self.link_builder.build_self_link(resource_path)}
        if collection_path:
            links['collection'] = self.link_builder.build_collection_link(collection_path)
        if actions:
            links.update(actions)

        response = dict(data)
        response['_links'] = self._dump(links)
        return response

    def format_collection(
        self,
        data: Dict[str, Any],
        collection_path: str,
        offset: int,
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Attach pagination links to a list response carrying ``total`` and ``limit``."""
        links = self.pagination_builder.build_pagination_links(
            collection_path,
            data['total'],
            data['limit'],
            offset,
            query_params
        )
        response = dict(data)
        response['_links'] = self._dump(links)
        return response

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
        error_response = {
            'type': f"{self.base_url}/problems/{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['errors'] = validation_errors

        links = {
            'help': self.link_builder.build_link(f"/docs/errors#{error_type}", title="Error documentation")
        }
        if status == 400:
            links['schema'] = self.link_builder.build_link("/openapi/openapi.json", title="API schema")
        elif status == 401:
            links['login'] = self.link_builder.build_link(
                "/api/auth/login",
                method="POST",
                content_type="application/json",
                title="Login"
            )

        error_response['_links'] = self._dump(links)
        return error_response

    def format_validation_error(
        self,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        return self.build_error_response(
            "validation-error",
            "Validation Error",
            400,
            detail,
            instance,
            validation_errors
        )

    def format_authentication_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.build_error_response(
            "authentication-required",
            "Authentication Required",
            401,
            detail,
            instance
        )

    def format_not_found_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.build_error_response(
            "resource-not-found",
            "Resource Not Found",
            404,
            detail,
            instance
        )

    def format_server_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.build_error_response(
            "internal-server-error",
            "Internal Server Error",
            500,
            detail,
            instance
        )


def create_hal_formatter(base_url: str) -> HalFormatter:
    """Create a HAL formatter instance."""
    return HalFormatter(base_url)
