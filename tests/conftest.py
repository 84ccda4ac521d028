import io
import json
import pytest
import pytest_asyncio

from aiohttp import web
from aiohttp.test_utils import TestServer
from dataclasses import dataclass, field
from multidict import CIMultiDict
from typing import Any, Optional

from freshdesksync.client import FreshdeskClient


API_KEY = 'test-api-key'


@dataclass
class RecordedRequest:
    method: str
    path: str
    body: str
    headers: CIMultiDict

    @property
    def json(self) -> Any:
        return json.loads(self.body)


@dataclass
class FakeResponse:
    status: int = 200
    body: Any = None
    content_type: str = 'application/json'
    headers: dict[str, str] = field(default_factory=dict)
    text: Optional[str] = None
    """Raw body sent instead of the encoded `body`."""

    def to_web_response(self) -> web.Response:
        if self.text is not None:
            text = self.text
        elif self.content_type == 'application/json':
            text = json.dumps(self.body)
        else:
            text = '' if self.body is None else str(self.body)
        return web.Response(
            status=self.status,
            text=text,
            content_type=self.content_type,
            headers=self.headers
            )


class FakeFreshdesk:
    """
    A local stand-in for the Freshdesk API. Responses are queued per method
    and path, and every request received is recorded.
    """
    def __init__(self) -> None:
        self.requests: list[RecordedRequest] = []
        self._responses: dict[tuple[str, str], list[FakeResponse]] = {}
        self.app = web.Application()
        self.app.router.add_route('*', '/{tail:.*}', self._handle)
        self.server: Optional[TestServer] = None

    @property
    def base_url(self) -> str:
        assert self.server is not None, 'Server is not started'
        return f'http://{self.server.host}:{self.server.port}'

    def add(self, method: str, path: str, **kwargs: Any) -> None:
        key = (method.upper(), path)
        self._responses.setdefault(key, []).append(FakeResponse(**kwargs))

    def requests_to(self, method: str, path: str) -> list[RecordedRequest]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.path == path
            ]

    async def _handle(self, request: web.Request) -> web.Response:
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                body=await request.text(),
                headers=request.headers.copy()
                )
            )
        queue = self._responses.get((request.method, request.path))
        if not queue:
            return web.Response(status=500, text='no response queued')
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        return response.to_web_response()


@pytest_asyncio.fixture
async def freshdesk():
    fake = FakeFreshdesk()
    async with TestServer(fake.app) as server:
        fake.server = server
        yield fake


@pytest.fixture
def api_key() -> str:
    return API_KEY


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest_asyncio.fixture
async def client(freshdesk, api_key, output):
    async with FreshdeskClient(
        freshdesk.base_url, api_key, output=output
    ) as client:
        yield client
