"""Pure HTTP response builders."""

from http import HTTPStatus

from tinyfs.domain.http_types import HttpResponse

HTML_CONTENT_TYPE = "text/html"


def _error_page(status: HTTPStatus, detail: str) -> bytes:
    return (
        f"<html><body><h1>{status.value} {status.phrase}</h1>"
        f"<p>{detail}</p></body></html>"
    ).encode()


def ok_response(body: bytes, content_type: str) -> HttpResponse:
    """Return a 200 response carrying ``body``."""
    return HttpResponse(HTTPStatus.OK, content_type, body)


def html_response(markup: str) -> HttpResponse:
    """Return a 200 text/html response for generated markup."""
    return HttpResponse(
        HTTPStatus.OK, HTML_CONTENT_TYPE, markup.encode(errors="surrogateescape")
    )


def not_found_response() -> HttpResponse:
    return HttpResponse(
        HTTPStatus.NOT_FOUND,
        HTML_CONTENT_TYPE,
        _error_page(HTTPStatus.NOT_FOUND, "The requested resource was not found."),
    )


def forbidden_response() -> HttpResponse:
    return HttpResponse(
        HTTPStatus.FORBIDDEN,
        HTML_CONTENT_TYPE,
        _error_page(HTTPStatus.FORBIDDEN, "Access denied."),
    )


def method_not_allowed_response(allowed_methods: frozenset[str]) -> HttpResponse:
    """Produce a 405 response enumerating the supported HTTP methods."""
    return HttpResponse(
        HTTPStatus.METHOD_NOT_ALLOWED,
        HTML_CONTENT_TYPE,
        _error_page(HTTPStatus.METHOD_NOT_ALLOWED, "This method is not allowed."),
        {"Allow": ", ".join(sorted(allowed_methods))},
    )


def internal_error_response(detail: str = "Server error occurred.") -> HttpResponse:
    return HttpResponse(
        HTTPStatus.INTERNAL_SERVER_ERROR,
        HTML_CONTENT_TYPE,
        _error_page(HTTPStatus.INTERNAL_SERVER_ERROR, detail),
    )
