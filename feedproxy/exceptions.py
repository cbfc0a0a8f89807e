"""Exceptions for the proxy pipeline. Each carries the HTTP status it maps to."""


class ProxyError(Exception):
    """Base class for errors reported to the caller as ``{"error": message}``"""
    status = 500

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class InputError(ProxyError):
    """Missing or malformed request parameters, detected before any network call"""
    status = 400


class MethodNotAllowedError(InputError):
    status = 405

    def __init__(self, message: str = "Method not allowed"):
        super().__init__(message)


class UpstreamError(ProxyError):
    """Exception raised when the remote feed or article cannot be fetched"""
    status = 502

    def __init__(self, message: str, upstream_status: int = None):
        super().__init__(message)
        self.upstream_status = upstream_status  # None for network failures


class InternalError(ProxyError):
    status = 500
