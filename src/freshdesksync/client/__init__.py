"""`freshdesksync.client` package provides the asynchronous client of
the Freshdesk Solutions API along with its error and result types.
"""

from ._client import (
    FreshdeskClient,
    FreshdeskError,
    HttpError,
    NonJsonResponse,
    RateLimitState,
    ResponseOutcome,
    ResponseResult,
    TranslationResult,
    TranslationStatus,
    build_auth_header,
)

__all__ = [
    'FreshdeskClient',
    'FreshdeskError',
    'HttpError',
    'NonJsonResponse',
    'RateLimitState',
    'ResponseOutcome',
    'ResponseResult',
    'TranslationResult',
    'TranslationStatus',
    'build_auth_header',
]
