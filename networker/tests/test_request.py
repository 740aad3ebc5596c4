import asyncio
import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import BaseModel, ValidationError

from networker import transport as transport_mod
from networker.decoding import JSONReadingOptions
from networker.errors import (
    EmptyDataError,
    EmptyPathError,
    InvalidPathError,
    UnknownResponseError,
    UnsuccessfulHTTPStatusCodeError,
)
from networker.headers import HTTPHeader
from networker.request import HTTPRequest, PreparedRequest, parse_url
from networker.responses import DataResponse


class Product(BaseModel):
    title: str


@pytest.mark.parametrize(
    "path",
    ["http://example.com/", "https://example.com:8443/a?b=c#d", "file:///tmp/x.txt", "data:text/plain,hi"],
)
def test_parse_url_accepts_absolute_urls(path: str) -> None:
    assert parse_url(path) == path


@pytest.mark.parametrize(
    "path",
    ["not a url", "example.com/path", "http://", "http://example.com:99999/", "http://[::1", "http://a\tb/"],
)
def test_parse_url_rejects_garbage(path: str) -> None:
    assert parse_url(path) is None


def test_from_path_blank_raises_empty_path(stub_transport) -> None:
    with pytest.raises(EmptyPathError):
        HTTPRequest.from_path("  ", stub_transport())
    with pytest.raises(EmptyPathError):
        HTTPRequest.from_path("\n\t", stub_transport())


def test_from_path_invalid_raises_with_trimmed_path(stub_transport) -> None:
    with pytest.raises(InvalidPathError) as exc:
        HTTPRequest.from_path("  not a url ", stub_transport())
    assert exc.value == InvalidPathError("not a url")
    assert exc.value.path == "not a url"


def test_from_path_builds_get_request(stub_transport) -> None:
    t = stub_transport()
    req = HTTPRequest.from_path("  http://example.com/items \n", t)

    assert req.request.url == "http://example.com/items"
    assert req.request.method == "GET"
    assert req.transport is t


def test_create_returns_result(stub_transport) -> None:
    assert HTTPRequest.create("", stub_transport()).failure == EmptyPathError()
    assert HTTPRequest.create("not a url", stub_transport()).failure == InvalidPathError("not a url")

    ok = HTTPRequest.create("http://example.com/", stub_transport())
    assert ok.success.request.url == "http://example.com/"


def test_default_transport_is_used_when_none_injected(monkeypatch, stub_transport) -> None:
    t = stub_transport()
    monkeypatch.setattr("networker.request.default_transport", lambda: t)

    req = HTTPRequest.from_url("http://example.com/")
    assert req.transport is t


def test_default_transport_is_shared() -> None:
    assert transport_mod.default_transport() is transport_mod.default_transport()


def test_wrapper_keeps_its_own_copy_of_the_request(stub_transport) -> None:
    prepared = PreparedRequest(url="http://example.com/", method="POST", body=b"{}")
    req = HTTPRequest(prepared, stub_transport())
    prepared.set_header(HTTPHeader("X-Late", "1"))

    assert "X-Late" not in req.request.headers


def test_request_property_cannot_change_what_is_sent(stub_transport) -> None:
    t = stub_transport()
    req = HTTPRequest(PreparedRequest(url="http://example.com/"), t)

    req.request.set_header(HTTPHeader("Authorization", "Bearer stolen"))
    req.request.url = "http://attacker.example/"
    req.fetch_bytes(lambda r: None)

    assert t.requests[0].url == "http://example.com/"
    assert t.requests[0].header("authorization") is None


def test_fetch_bytes_dispatches_once_and_returns_handle(stub_transport, ok_response) -> None:
    t = stub_transport(data=b"hello", response=ok_response)
    req = HTTPRequest(PreparedRequest(url="http://example.com/", headers={"Accept": "*/*"}), t)
    results = []

    handle = req.fetch_bytes(results.append)

    assert handle.done()
    assert len(t.requests) == 1
    assert t.requests[0].header("accept") == "*/*"
    assert len(results) == 1
    assert results[0].success == DataResponse(data=b"hello", response=ok_response)


def test_fetch_bytes_passes_transport_error_through(stub_transport) -> None:
    err = TimeoutError("read timed out")
    req = HTTPRequest.from_url("http://example.com/", stub_transport(error=err))
    results = []

    req.fetch_bytes(results.append)

    assert results[0].failure is err


def test_fetch_bytes_empty_bytes_without_response(stub_transport) -> None:
    req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b""))
    results = []
    req.fetch_bytes(results.append)
    assert results[0].failure == UnknownResponseError()


def test_fetch_bytes_no_data_with_ok_response(stub_transport, ok_response) -> None:
    req = HTTPRequest.from_url("http://example.com/", stub_transport(response=ok_response))
    results = []
    req.fetch_bytes(results.append)
    assert results[0].failure == EmptyDataError()


def test_fetch_bytes_server_error_carries_body(stub_transport, server_error_response) -> None:
    req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"down", response=server_error_response))
    results = []

    req.fetch_bytes(results.append)

    err = results[0].failure
    assert isinstance(err, UnsuccessfulHTTPStatusCodeError)
    assert err.data_response == DataResponse(data=b"down", response=server_error_response)


def test_fetch_json_success(stub_transport, ok_response) -> None:
    body = json.dumps({"id": 7, "tags": ["a", "b"], "price": 1.5}).encode("utf-8")
    req = HTTPRequest.from_url("http://example.com/", stub_transport(data=body, response=ok_response))
    results = []

    req.fetch_json(results.append)

    out = results[0].success
    assert out.json == json.loads(body)
    assert out.response == ok_response


def test_fetch_json_parse_failure_and_options(stub_transport, ok_response) -> None:
    bad = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"<html>", response=ok_response))
    results = []
    bad.fetch_json(results.append)
    assert isinstance(results[0].failure, json.JSONDecodeError)

    frag = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"true", response=ok_response))
    frag.fetch_json(results.append, options=JSONReadingOptions(allow_fragments=True))
    assert results[1].success.json is True


def test_fetch_json_upstream_failure_passes_through(stub_transport, server_error_response) -> None:
    req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"{}", response=server_error_response))
    results = []
    req.fetch_json(results.append)
    assert isinstance(results[0].failure, UnsuccessfulHTTPStatusCodeError)


def test_fetch_decoded(stub_transport, ok_response) -> None:
    req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b'{"title": "Lamp"}', response=ok_response))
    results = []

    req.fetch_decoded(Product, results.append)

    out = results[0].success
    assert out.decoded == Product(title="Lamp")
    assert out.response is ok_response


def test_fetch_decoded_validation_error(stub_transport, ok_response) -> None:
    req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b'{"name": "Lamp"}', response=ok_response))
    results = []
    req.fetch_decoded(Product, results.append)
    assert isinstance(results[0].failure, ValidationError)


def test_completion_runs_on_requested_executor(stub_transport, ok_response) -> None:
    seen = []
    done = threading.Event()

    def completion(result) -> None:
        seen.append((threading.current_thread().name, result))
        done.set()

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="callbacks") as pool:
        req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"{}", response=ok_response))
        req.fetch_json(completion, executor=pool)
        assert done.wait(5)

    name, result = seen[0]
    assert name.startswith("callbacks")
    assert result.success.json == {}


def test_wrapper_default_executor(stub_transport, ok_response) -> None:
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="main-queue") as pool:
        req = HTTPRequest.from_url(
            "http://example.com/", stub_transport(data=b"x", response=ok_response), executor=pool
        )
        names = []
        req.fetch_bytes(lambda r: names.append(threading.current_thread().name))
    assert names[0].startswith("main-queue")


def test_completion_on_event_loop(stub_transport, ok_response) -> None:
    async def main():
        loop = asyncio.get_running_loop()
        fut = loop.create_future()
        req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"[1]", response=ok_response))
        req.fetch_json(fut.set_result, executor=loop)
        return await asyncio.wait_for(fut, 5)

    result = asyncio.run(main())
    assert result.success.json == [1]


def test_handle_settles_after_executor_completion(stub_transport, ok_response) -> None:
    ran = threading.Event()

    def completion(result) -> None:
        time.sleep(0.2)
        ran.set()

    with ThreadPoolExecutor(max_workers=1) as pool:
        req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"x", response=ok_response))
        handle = req.fetch_bytes(completion, executor=pool)

        assert handle.result(timeout=5) is None
        assert ran.is_set()


def test_executor_completion_error_reaches_handle(stub_transport, ok_response, caplog) -> None:
    def completion(result) -> None:
        time.sleep(0.1)
        raise RuntimeError("completion failed")

    with ThreadPoolExecutor(max_workers=1) as pool:
        req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"x", response=ok_response))
        with caplog.at_level(logging.ERROR, logger="networker.request"):
            handle = req.fetch_bytes(completion, executor=pool)
            with pytest.raises(RuntimeError, match="completion failed"):
                handle.result(timeout=5)

    assert any(r.message == "fetch_failed" for r in caplog.records)


def test_inline_completion_error_reaches_handle(stub_transport, ok_response) -> None:
    def completion(result) -> None:
        raise ValueError("bad completion")

    req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"x", response=ok_response))
    handle = req.fetch_bytes(completion)

    assert isinstance(handle.exception(timeout=0), ValueError)


def test_event_loop_handle_waits_for_completion(stub_transport, ok_response) -> None:
    async def main():
        loop = asyncio.get_running_loop()
        seen = []
        req = HTTPRequest.from_url("http://example.com/", stub_transport(data=b"[1]", response=ok_response))
        handle = req.fetch_json(seen.append, executor=loop)

        assert not handle.done()
        await asyncio.wrap_future(handle)
        return seen

    seen = asyncio.run(main())
    assert seen[0].success.json == [1]
