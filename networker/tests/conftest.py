from __future__ import annotations

from concurrent.futures import Future
from typing import List, Optional

import pytest

from networker.request import PreparedRequest
from networker.responses import HTTPResponse, ResponseMetadata


class StubTransport:
    """Transport double that completes synchronously with a canned triple."""

    def __init__(
        self,
        data: Optional[bytes] = None,
        response: Optional[ResponseMetadata] = None,
        error: Optional[BaseException] = None,
    ):
        self.data = data
        self.response = response
        self.error = error
        self.requests: List[PreparedRequest] = []

    def dispatch(self, request: PreparedRequest, on_complete) -> Future:
        self.requests.append(request)
        future: Future = Future()
        future.set_running_or_notify_cancel()
        on_complete(self.data, self.response, self.error)
        future.set_result(None)
        return future


@pytest.fixture
def stub_transport():
    def make(data=None, response=None, error=None) -> StubTransport:
        return StubTransport(data=data, response=response, error=error)

    return make


@pytest.fixture
def ok_response() -> HTTPResponse:
    return HTTPResponse(url="http://example.com/", status_code=200, headers={"Content-Type": "application/json"})


@pytest.fixture
def server_error_response() -> HTTPResponse:
    return HTTPResponse(url="http://example.com/", status_code=500)
