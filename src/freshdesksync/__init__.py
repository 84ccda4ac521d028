from . import client, solution
from ._logging import logger
from .client import (
    FreshdeskClient,
    FreshdeskError,
    HttpError,
    NonJsonResponse,
    RateLimitState,
    TranslationResult,
    TranslationStatus,
)
from .solution import Article, Category, Folder, SolutionEntity

__all__ = [
    'Article',
    'Category',
    'Folder',
    'FreshdeskClient',
    'FreshdeskError',
    'HttpError',
    'NonJsonResponse',
    'RateLimitState',
    'SolutionEntity',
    'TranslationResult',
    'TranslationStatus',
    'client',
    'logger',
    'solution',
]
