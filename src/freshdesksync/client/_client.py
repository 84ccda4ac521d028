import asyncio
import aiohttp
import base64
import dataclasses
import enum
import json
import logging
import sys

from typing import cast, Any, Optional, TextIO, Union

from ..solution._solution import (
    EntityRef,
    SolutionEntity,
    get_articles_path,
    get_folders_path,
)


logger = logging.getLogger('freshdesksync.client')


TransportError = (aiohttp.ClientError, asyncio.TimeoutError)
"""Lower-level failures of the HTTP transport, propagated unmodified."""

UpsertError = TransportError + (ValueError,)
"""Failures reported by a translation update besides HTTP errors. A
`ValueError` covers a success response whose JSON body cannot be decoded."""


class FreshdeskError(Exception):
    """Base class for errors raised on unexpected Freshdesk API responses."""


class HttpError(FreshdeskError):
    """
    Raised when a Freshdesk API response has a non-success HTTP status.

    Args:
        code (int): The HTTP status code of the response.
        reason (str): The HTTP status text of the response.
        retry_after (Optional[str]): The value of the `Retry-After` header
            of a 429 (Too Many Requests) response. None otherwise.
    """

    def __init__(
        self, code: int, reason: str, retry_after: Optional[str] = None
    ) -> None:
        super().__init__(f'response {reason}')
        self.code = code
        self.reason = reason
        self.retry_after = retry_after


class NonJsonResponse(FreshdeskError):
    """
    Raised when a Freshdesk API response has a success HTTP status,
    but its contents is not JSON.
    """

    def __init__(self, content_type: Optional[str]) -> None:
        super().__init__(f'response not json: {content_type}')
        self.content_type = content_type


class RateLimitState(enum.Enum):
    """
    State of the one-shot rate limit circuit breaker of a client.

    The breaker starts `OPEN` and moves to `TRIPPED` the first time
    the API answers a translation update with HTTP 429. There is no way back:
    a tripped client skips every following translation update.
    """
    OPEN = 'open'
    """Requests are sent to the API."""
    TRIPPED = 'tripped'
    """Translation updates are skipped without contacting the API."""


class ResponseOutcome(enum.Enum):
    """Classification of a completed Freshdesk API response."""
    SUCCESS = 'success'
    NOT_FOUND = 'not_found'
    ERROR = 'error'


@dataclasses.dataclass(frozen=True)
class ResponseResult:
    """Result of a single Freshdesk API request."""
    outcome: ResponseOutcome
    data: Any = None
    """Parsed JSON contents of a successful response."""
    error: Optional[FreshdeskError] = None
    """Error describing a not found or failed response."""

    def __post_init__(self) -> None:
        if self.outcome is not ResponseOutcome.SUCCESS and self.error is None:
            raise ValueError(f'{self.outcome} result requires an error.')

    @property
    def is_success(self) -> bool:
        return self.outcome is ResponseOutcome.SUCCESS

    def raise_for_error(self) -> None:
        """Raise the error of the result if the response was not successful."""
        if self.error is not None:
            raise self.error


class TranslationStatus(enum.Enum):
    """Status of a translation update."""
    SENT = 'sent'
    """The translation was updated or created."""
    SKIPPED = 'skipped'
    """The update was skipped because the client is rate limited."""
    FAILED = 'failed'
    """The update failed."""


@dataclasses.dataclass(frozen=True)
class TranslationResult:
    """
    Outcome of a translation update. Only a `SENT` result carries
    the translation resource returned by the API.
    """
    status: TranslationStatus
    data: Any = None
    """Parsed JSON of the translation resource, for `SENT` results."""
    error: Optional[Exception] = None
    """The failure, for `FAILED` results."""

    @property
    def is_sent(self) -> bool:
        return self.status is TranslationStatus.SENT

    @property
    def is_skipped(self) -> bool:
        return self.status is TranslationStatus.SKIPPED

    @property
    def is_failed(self) -> bool:
        return self.status is TranslationStatus.FAILED

    def unwrap(self) -> Any:
        """
        Get the translation resource of a sent update.

        Raises:
            Exception: The stored error of a failed update.
            RuntimeError: If the update was skipped.
        """
        if self.status is TranslationStatus.FAILED:
            assert self.error is not None, 'Failed result without error'
            raise self.error
        if self.status is TranslationStatus.SKIPPED:
            raise RuntimeError('Translation update was skipped.')
        return self.data


def build_auth_header(api_key: str) -> str:
    """
    Build the value of the `Authorization` header for a Freshdesk API key.
    Freshdesk expects the key as the Basic auth username and any password.
    """
    credentials = f'{api_key}:X'.encode('utf-8')
    return 'Basic ' + base64.b64encode(credentials).decode('ascii')


class FreshdeskClient:
    """
    Asynchronous client of the Freshdesk Solutions (knowledge base) API.
    This class wraps an `aiohttp.ClientSession` object and provides methods
    for listing categories, folders and articles and for updating or creating
    their translations.

    Creating the client does not connect to the API. Start a session with
    `start_session` or use the client as an asynchronous context manager.

    Args:
        base_url (str): The base URL of the Freshdesk instance,
            like 'https://<yourdomain>.freshdesk.com'.
        api_key (str): The Freshdesk API key.
        timeout (aiohttp.ClientTimeout | int | float | None): Timeout of
            each request. No timeout is applied by default.
        output (Optional[TextIO]): Stream receiving diagnostic lines about
            skipped and failed translation updates. Defaults to stdout.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: Optional[Union[aiohttp.ClientTimeout, int, float]] = None,
        output: Optional[TextIO] = None
    ) -> None:
        self._base_url = base_url.rstrip('/')
        self._auth_header = build_auth_header(api_key)
        self._default_headers = {
            'Content-Type': 'application/json',
            'Authorization': self._auth_header,
        }
        self._timeout = self._check_client_timeout(timeout)
        self._output = output
        self._rate_limit_state = RateLimitState.OPEN
        self._retry_after: Optional[str] = None
        self._client_session: Optional[aiohttp.ClientSession] = None

    def __repr__(self) -> str:
        cls_name = self.__class__.__name__
        return f'{cls_name}(base_url={self._base_url!r})'

    async def __aenter__(self):
        """Asynchronous context manager entry."""
        await self.start_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Asynchronous context manager exit."""
        await self.close_session()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def auth_header(self) -> str:
        return self._auth_header

    @property
    def default_headers(self) -> dict[str, str]:
        return self._default_headers.copy()

    @property
    def session(self) -> Optional[aiohttp.ClientSession]:
        return self._client_session

    @property
    def is_session_closed(self) -> bool:
        if not self._client_session:
            return True
        return self._client_session.closed

    async def set_session(self, session: aiohttp.ClientSession) -> None:
        if not self.is_session_closed:
            await self.close_session()
        self._client_session = session

    @property
    def timeout(self) -> aiohttp.ClientTimeout:
        return self._timeout

    @staticmethod
    def _check_client_timeout(timeout: Any) -> aiohttp.ClientTimeout:
        if timeout is None:
            return aiohttp.ClientTimeout()
        if isinstance(timeout, aiohttp.ClientTimeout):
            return timeout
        try:
            timeout = float(timeout)
            if timeout < 0:
                raise ValueError('Timeout cannot be negative.')
            return aiohttp.ClientTimeout(total=timeout)
        except (TypeError, ValueError) as err:
            raise ValueError(f'Invalid timeout argument "{timeout}".') from err

    def set_timeout(
        self, timeout: Optional[Union[aiohttp.ClientTimeout, int, float]]
    ) -> None:
        self._timeout = self._check_client_timeout(timeout)

    @property
    def rate_limit_state(self) -> RateLimitState:
        return self._rate_limit_state

    @property
    def is_rate_limited(self) -> bool:
        return self._rate_limit_state is RateLimitState.TRIPPED

    @property
    def retry_after(self) -> Optional[str]:
        """
        The `Retry-After` header value of the response that tripped
        the rate limit breaker, if the API provided one.
        The client never acts on it; it is left to the caller.
        """
        return self._retry_after

    def trip_rate_limit(self, retry_after: Optional[str] = None) -> None:
        """
        Trip the rate limit breaker. All following translation updates
        are skipped. The breaker cannot be reset; create a new client instead.

        Args:
            retry_after (Optional[str]): The `Retry-After` value to record.
                Ignored if the breaker is already tripped.
        """
        if self._rate_limit_state is RateLimitState.TRIPPED:
            return
        self._rate_limit_state = RateLimitState.TRIPPED
        self._retry_after = retry_after
        logger.warning(
            'Rate limit reached for "%s" (Retry-After: %s). '
            'Skipping further translation updates.',
            self._base_url, retry_after
            )

    async def start_session(self) -> None:
        """Start an aiohttp client session if not already started."""
        if not self.is_session_closed:
            logger.debug(
                'Client session for "%s" is already started.', self._base_url
                )
            return
        logger.info('Starting new client session for "%s".', self._base_url)
        self._client_session = aiohttp.ClientSession()
        logger.debug(
            'Successfully opened client session for "%s".', self._base_url
            )

    async def close_session(self) -> None:
        """Close the aiohttp client session if it's open."""
        if self.is_session_closed:
            logger.debug(
                'Client session for "%s" is already closed.', self._base_url
                )
            return
        logger.info('Closing client session for "%s".', self._base_url)
        await self._client_session.close()  # type: ignore
        logger.debug(
            'Successfully closed client session for "%s".', self._base_url
            )

    def _get_session(self) -> aiohttp.ClientSession:
        if not self._client_session or self._client_session.closed:
            raise ValueError('Client session is not initialized or is closed.')
        return self._client_session

    def _write_diagnostic(self, line: str) -> None:
        output = sys.stdout if self._output is None else self._output
        output.write(f'{line}\n')

    @staticmethod
    def check_response(response: aiohttp.ClientResponse) -> ResponseResult:
        """
        Classify a completed response by its status and content type.

        Args:
            response (aiohttp.ClientResponse): The response to check.

        Returns:
            ResponseResult: `SUCCESS` (without data) for a JSON response with
            a success status, `NOT_FOUND` for 404 and `ERROR` otherwise.
        """
        content_type = response.headers.get('Content-Type')
        if 200 <= response.status < 300:
            if content_type and content_type.startswith('application/json'):
                return ResponseResult(ResponseOutcome.SUCCESS)
            return ResponseResult(
                ResponseOutcome.ERROR, error=NonJsonResponse(content_type)
                )
        retry_after = None
        if response.status == 429:
            retry_after = response.headers.get('Retry-After')
        error = HttpError(response.status, response.reason or '', retry_after)
        if response.status == 404:
            return ResponseResult(ResponseOutcome.NOT_FOUND, error=error)
        return ResponseResult(ResponseOutcome.ERROR, error=error)

    async def _request(
        self, method: str, path: str, body: Any = None
    ) -> ResponseResult:
        session = self._get_session()
        url = f'{self._base_url}{path}'
        data = None if body is None else json.dumps(body).encode('utf-8')
        logger.info('Sending %s request to "%s"', method, url)
        async with session.request(
            method,
            url,
            data=data,
            headers=self._default_headers,
            timeout=self._timeout
        ) as response:
            result = self.check_response(response)
            if not result.is_success:
                logger.debug(
                    '%s request to "%s" failed: HTTP Status %s',
                    method, url, response.status
                    )
                return result
            logger.debug('Successfully received data from "%s"', url)
            contents = await response.json(content_type=None)
            return dataclasses.replace(result, data=contents)

    async def _list(self, path: str) -> list[Any]:
        result = await self._request('GET', path)
        result.raise_for_error()
        return result.data

    async def list_categories(self) -> list[Any]:
        """
        List all solution categories.

        Returns:
            list: The JSON documents of the categories, as returned by the API.

        Raises:
            HttpError: If the response status is not a success.
            NonJsonResponse: If the response is not JSON.
        """
        return await self._list(SolutionEntity.CATEGORY.collection_path)

    async def list_folders(self, category: EntityRef) -> list[Any]:
        """
        List the folders of a solution category.

        Args:
            category (EntityRef): The category, its JSON document or its ID.

        Returns:
            list: The JSON documents of the folders, as returned by the API.
        """
        return await self._list(get_folders_path(category))

    async def list_articles(self, folder: EntityRef) -> list[Any]:
        """
        List the articles of a solution folder.

        Args:
            folder (EntityRef): The folder, its JSON document or its ID.

        Returns:
            list: The JSON documents of the articles, as returned by the API.
        """
        return await self._list(get_articles_path(folder))

    def _handle_failure(
        self,
        entity_id: Union[int, str],
        locale: str,
        error: Exception,
        raise_on_error: bool
    ) -> TranslationResult:
        if isinstance(error, HttpError) and error.code == 429:
            self.trip_rate_limit(error.retry_after)
        logger.error(
            'Failed to update translation "%s" of id %s: %s',
            locale, entity_id, error
            )
        self._write_diagnostic(
            f'Error processing id {entity_id} for locale {locale}: {error}'
            )
        if raise_on_error:
            raise error
        return TranslationResult(TranslationStatus.FAILED, error=error)

    async def upsert_translation(
        self,
        entity: Union[SolutionEntity, str],
        entity_id: Union[int, str],
        locale: str,
        body: Any,
        raise_on_error: bool = True
    ) -> TranslationResult:
        """
        Update the translation of a solution entity, creating it if it
        does not exist yet.

        The translation is sent with PUT. If the API answers 404, it is sent
        once more with POST and that outcome is final. An HTTP 429 response
        trips the rate limit breaker; once tripped, the update is skipped
        without contacting the API.

        Args:
            entity (SolutionEntity | str): The entity type, or its
                collection name like 'articles'.
            entity_id (int | str): The Freshdesk ID of the entity.
            locale (str): The locale code, like 'en' or 'fr'.
            body (Any): The JSON-serializable translation to send.
            raise_on_error (bool): If True, a failed update raises its error
                after it is reported. Otherwise, a `FAILED` result is
                returned. Defaults to True.

        Returns:
            TranslationResult: A `SENT` result with the translation resource
            or a `SKIPPED` result if the client is rate limited.

        Raises:
            HttpError: If the API rejects the update.
            NonJsonResponse: If the response is not JSON.
            ValueError: If a JSON response body cannot be decoded.
            aiohttp.ClientError: On transport failures.
        """
        entity = SolutionEntity(entity)
        if self.is_rate_limited:
            logger.warning(
                'Rate limited, skipping translation "%s" of %s %s',
                locale, entity.name.lower(), entity_id
                )
            self._write_diagnostic(
                f'Rate limited, skipping id: {entity_id} for {locale}'
                )
            return TranslationResult(TranslationStatus.SKIPPED)
        path = entity.translation_path(entity_id, locale)
        try:
            result = await self._request('PUT', path, body)
            if result.outcome is ResponseOutcome.NOT_FOUND:
                logger.info(
                    'Translation "%s" of %s %s not found, creating it',
                    locale, entity.name.lower(), entity_id
                    )
                result = await self._request('POST', path, body)
        except UpsertError as exc:
            return self._handle_failure(entity_id, locale, exc, raise_on_error)
        if not result.is_success:
            error = cast(FreshdeskError, result.error)
            return self._handle_failure(
                entity_id, locale, error, raise_on_error
                )
        return TranslationResult(TranslationStatus.SENT, data=result.data)

    async def update_category_translation(
        self,
        category_id: Union[int, str],
        locale: str,
        body: Any,
        raise_on_error: bool = True
    ) -> TranslationResult:
        """Update or create the translation of a solution category."""
        return await self.upsert_translation(
            SolutionEntity.CATEGORY, category_id, locale, body, raise_on_error
            )

    async def update_folder_translation(
        self,
        folder_id: Union[int, str],
        locale: str,
        body: Any,
        raise_on_error: bool = True
    ) -> TranslationResult:
        """Update or create the translation of a solution folder."""
        return await self.upsert_translation(
            SolutionEntity.FOLDER, folder_id, locale, body, raise_on_error
            )

    async def update_article_translation(
        self,
        article_id: Union[int, str],
        locale: str,
        body: Any,
        raise_on_error: bool = True
    ) -> TranslationResult:
        """Update or create the translation of a solution article."""
        return await self.upsert_translation(
            SolutionEntity.ARTICLE, article_id, locale, body, raise_on_error
            )
