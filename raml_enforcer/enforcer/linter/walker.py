"""Depth-first traversal of the endpoint hierarchy."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Collection

from enforcer.document.base import SchemaWriter
from enforcer.document.models import ApiDocument, EndPoint, Payload
from enforcer.linter.models import Issue
from enforcer.linter.rules import (
    check_operation_description,
    check_response,
    payloads_to_export,
    request_payloads,
    run_api_rules,
    run_endpoint_rules,
)

logger = logging.getLogger(__name__)


def count_nodes(endpoints: list[EndPoint]) -> tuple[int, int]:
    """Return (endpoints, operations) reachable from ``endpoints``."""
    n_endpoints = 0
    n_operations = 0
    for endpoint in endpoints:
        child_endpoints, child_operations = count_nodes(endpoint.endpoints)
        n_endpoints += 1 + child_endpoints
        n_operations += len(endpoint.operations) + child_operations
    return n_endpoints, n_operations


class TreeWalker:
    """Applies the rule set to every node of a document, parents first.

    Payload schemas are handed to ``writer`` as the walk reaches them; each
    write completes before the walk moves on.
    """

    def __init__(
        self,
        writer: SchemaWriter,
        origin_file: str,
        no_body_status_codes: Collection[int] = frozenset({204}),
    ) -> None:
        self._writer = writer
        self._origin_file = origin_file
        self._no_body = frozenset(no_body_status_codes)

    async def walk_document(self, api: ApiDocument) -> AsyncIterator[Issue]:
        n_endpoints, n_operations = count_nodes(api.endpoints)
        logger.debug(
            "Walking %s: %d endpoints, %d operations",
            api.file, n_endpoints, n_operations,
        )
        for issue in run_api_rules(api):
            yield issue
        for endpoint in api.endpoints:
            async for issue in self.walk(endpoint, endpoint.path):
                yield issue

    async def walk(self, endpoint: EndPoint, location: str) -> AsyncIterator[Issue]:
        """Yield the issues of ``endpoint`` and then of its descendants.

        ``location`` is the full path from the root down to ``endpoint``.
        """
        for issue in run_endpoint_rules(endpoint, location):
            yield issue

        for operation in endpoint.operations:
            for issue in check_operation_description(operation, location):
                yield issue
            for payload in request_payloads(operation):
                await self._export(payload)
            for response in operation.responses:
                for issue in check_response(response, operation, location, self._no_body):
                    yield issue
                for payload in payloads_to_export(response, self._no_body):
                    await self._export(payload)

        for child in endpoint.endpoints:
            async for issue in self.walk(child, location + child.path):
                yield issue

    async def _export(self, payload: Payload) -> None:
        path = await self._writer.write(payload, self._origin_file)
        logger.debug("Exported %s schema to %s", payload.media_type, path)
