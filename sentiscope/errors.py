"""
errors.py

Exception hierarchy shared by the gateway, the normalizer, the history
backends and the route handlers. Each error knows the JSON error code and
HTTP status a route should answer with.
"""


class SentiScopeError(Exception):
    error_code = 'INTERNAL_ERROR'
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self):
        return {'error': self.error_code, 'message': self.message}


class ValidationError(SentiScopeError):
    error_code = 'VALIDATION_ERROR'
    status_code = 400


class ConfigurationError(SentiScopeError):
    error_code = 'CONFIGURATION_ERROR'
    status_code = 500


class NoResultError(SentiScopeError):
    error_code = 'INTERNAL_ERROR'
    status_code = 500


class NotFound(SentiScopeError):
    error_code = 'NOT_FOUND'
    status_code = 404


class Unauthorized(SentiScopeError):
    error_code = 'UNAUTHORIZED'
    status_code = 401


class UpstreamError(SentiScopeError):
    """
    A single hosted endpoint failed. `status` is the HTTP status code, or
    None when the request never got a response (connection error, timeout).
    """

    error_code = 'UPSTREAM_ERROR'
    status_code = 500

    def __init__(self, status=None, detail=''):
        self.status = status
        self.detail = detail
        message = f"Upstream error: {status if status is not None else 'network'}"
        if detail:
            message += f" - {detail}"
        super().__init__(message)


class UpstreamUnavailable(SentiScopeError):
    """Both the primary and the fallback model failed."""

    error_code = 'UPSTREAM_UNAVAILABLE'
    status_code = 500

    def __init__(self, primary_error, fallback_error):
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(
            f"Both models failed. Primary: {primary_error.message}. "
            f"Fallback: {fallback_error.message}"
        )

    @property
    def status_codes(self):
        return [
            err.status for err in (self.primary_error, self.fallback_error)
            if err.status is not None
        ]

    def friendly_message(self):
        codes = self.status_codes
        if 503 in codes or 504 in codes:
            return 'The AI model is temporarily unavailable. Please try again in a few moments.'
        if 429 in codes:
            return 'Too many requests right now. Please wait a moment and try again.'
        if 401 in codes:
            return 'The analysis service is not configured correctly (authentication failed).'
        return 'Sentiment analysis failed. Please try again later.'
