"""Deterministic lint rules: pure functions, one node at a time."""

from __future__ import annotations

from collections.abc import Collection
from enum import Enum

from enforcer.document.models import ApiDocument, EndPoint, Operation, Payload, Response
from enforcer.linter.models import Issue, IssueSeverity, SourceLocation


class ResponseCase(str, Enum):
    """Outcome of the response decision table."""

    missing_payload = "missing_payload"
    unexpected_payload = "unexpected_payload"
    export_payloads = "export_payloads"
    empty = "empty"


def _issue(source: SourceLocation, message: str, severity: IssueSeverity) -> Issue:
    return Issue(source=source, message=message, severity=severity)


def check_api_title(api: ApiDocument) -> list[Issue]:
    if api.title:
        return []
    return [_issue(api.source, "API should specify a title", IssueSeverity.warning)]


def check_api_description(api: ApiDocument) -> list[Issue]:
    if api.description:
        return []
    return [_issue(api.source, "API should specify a description", IssueSeverity.warning)]


def check_endpoint_case(endpoint: EndPoint, location: str) -> list[Issue]:
    """Flag endpoints whose accumulated path is not entirely lower case."""
    if location == location.lower():
        return []
    return [_issue(
        endpoint.source,
        f"endpoint {location} should be in lower case",
        IssueSeverity.warning,
    )]


def check_endpoint_description(endpoint: EndPoint, location: str) -> list[Issue]:
    if endpoint.description:
        return []
    return [_issue(
        endpoint.source,
        f"endpoint {location} must have a description",
        IssueSeverity.violation,
    )]


def check_operation_description(operation: Operation, location: str) -> list[Issue]:
    if operation.description:
        return []
    return [_issue(
        operation.source,
        f"operation {operation.method.upper()} {location} should have a description",
        IssueSeverity.warning,
    )]


def classify_response(response: Response, no_body_status_codes: Collection[int]) -> ResponseCase:
    """Decide what a response needs from (has payloads, status in the no-body set)."""
    has_payloads = bool(response.payloads)
    no_body = response.status_code in no_body_status_codes

    if not has_payloads and not no_body:
        return ResponseCase.missing_payload
    if has_payloads and no_body:
        return ResponseCase.unexpected_payload
    if has_payloads and not no_body:
        return ResponseCase.export_payloads
    return ResponseCase.empty


def check_response(
    response: Response,
    operation: Operation,
    location: str,
    no_body_status_codes: Collection[int],
) -> list[Issue]:
    case = classify_response(response, no_body_status_codes)
    subject = f"response {response.status_code} of {operation.method.upper()} {location}"
    if case is ResponseCase.missing_payload:
        return [_issue(response.source, f"{subject} must have a response payload", IssueSeverity.violation)]
    if case is ResponseCase.unexpected_payload:
        return [_issue(response.source, f"{subject} must not return a payload", IssueSeverity.violation)]
    return []


def payloads_to_export(response: Response, no_body_status_codes: Collection[int]) -> list[Payload]:
    """Response payloads whose schema gets written to disk."""
    if classify_response(response, no_body_status_codes) is ResponseCase.export_payloads:
        return list(response.payloads)
    return []


def request_payloads(operation: Operation) -> list[Payload]:
    """Request payloads are always exported."""
    if operation.request is None:
        return []
    return list(operation.request.payloads)


def run_api_rules(api: ApiDocument) -> list[Issue]:
    issues: list[Issue] = []
    issues.extend(check_api_title(api))
    issues.extend(check_api_description(api))
    return issues


def run_endpoint_rules(endpoint: EndPoint, location: str) -> list[Issue]:
    issues: list[Issue] = []
    issues.extend(check_endpoint_case(endpoint, location))
    issues.extend(check_endpoint_description(endpoint, location))
    return issues
