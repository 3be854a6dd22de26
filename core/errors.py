"""Error taxonomy for the proxy handlers.

Every failure is raised as a ``ProxyError`` subclass carrying the HTTP status
the client should see; the pipeline renders it as ``{"error": message}``.
"""

from __future__ import annotations


class ProxyError(Exception):
    """Base class for errors that map directly to an HTTP error response."""

    status_code: int = 500


class ClientInputError(ProxyError):
    status_code = 400


class RoutingError(ProxyError):
    status_code = 405


class ConfigurationError(ProxyError):
    status_code = 500


class UpstreamError(ProxyError):
    """The upstream API failed or returned a non-success status."""

    status_code = 502


class ContractViolation(ProxyError):
    """The upstream API succeeded but its body lacks the expected payload."""

    status_code = 500
