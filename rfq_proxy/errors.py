from __future__ import annotations


class RelayError(RuntimeError):
    """Base error for the relay. ``status_code`` is the HTTP status returned to the storefront."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class SubmissionValidationError(RelayError):
    status_code = 400


class ProxyAuthenticationError(RelayError):
    status_code = 401


class UpstreamError(RelayError):
    """The Shopify Admin API answered with a failure or an incomplete payload.

    ``upstream_status`` and ``body`` are kept for operator diagnosis; the
    storefront still receives a 500.
    """

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class InternalError(RelayError):
    pass
