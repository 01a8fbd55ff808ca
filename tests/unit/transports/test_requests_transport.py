"""
Tests for RequestsTransport using the responses library.
"""

import socket

import pytest
import requests
import responses

from http_request import Request, RequestState
from http_request.core.exceptions import ConnectionError, ProtocolError, TransportError
from http_request.transports import (
    HTTPXTransport,
    RequestsTransport,
    resolve_transport,
)
from http_request.transports.base import TransportHandlers, TransportParams
from http_request.transports.requests_transport import (
    KeepAliveAdapter,
    keep_alive_socket_options,
)

URL = "https://api.example.com/users"


class TestResolveTransport:

    def test_default(self):
        assert isinstance(resolve_transport(), RequestsTransport)

    def test_by_name(self):
        assert isinstance(resolve_transport("httpx"), HTTPXTransport)
        assert isinstance(resolve_transport("REQUESTS"), RequestsTransport)

    def test_class(self):
        assert isinstance(resolve_transport(HTTPXTransport), HTTPXTransport)

    def test_instance(self):
        transport = RequestsTransport()
        assert resolve_transport(transport) is transport

    @pytest.mark.parametrize("value", ["curl", 42, object])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            resolve_transport(value)


class TestTransportBinding:

    def _params(self):
        return TransportParams(method="GET", protocol="https", hostname="api.example.com")

    def _handlers(self):
        return TransportHandlers(
            on_response=lambda *args: None,
            on_data=lambda chunk: None,
            on_end=lambda: None,
            on_error=lambda exc: None,
        )

    def test_params_url(self):
        params = TransportParams(
            method="GET", protocol="http", hostname="localhost", port=8080, path="/health"
        )
        assert params.url == "http://localhost:8080/health"
        assert not params.secure

    def test_bound_once(self):
        transport = RequestsTransport()
        transport.open(self._params(), self._handlers())
        with pytest.raises(RuntimeError):
            transport.open(self._params(), self._handlers())

    def test_end_requires_binding(self):
        with pytest.raises(RuntimeError):
            RequestsTransport().end()

    def test_instance_not_shared_between_requests(self):
        transport = RequestsTransport()
        Request(URL, transport=transport)
        with pytest.raises(RuntimeError):
            Request(URL, transport=transport)


class TestExchange:
    """Full exchanges against mocked responses."""

    @responses.activate
    def test_json_response(self):
        responses.add(responses.GET, URL, json={"users": [1, 2]}, status=200)

        req = Request(URL, data_type="json").submit()

        assert req.state is RequestState.RECEIVED
        assert req.data == {"users": [1, 2]}
        assert req.status_code == 200
        assert req.status_message == "OK"
        assert req.response_headers["Content-Type"] == "application/json"

    @responses.activate
    def test_signals_delivered_before_submit_returns(self):
        responses.add(responses.GET, URL, body=b"hello", status=200)
        states = []

        req = Request(URL)
        req.on("state", lambda state: states.append(state))
        req.submit()

        assert states == [RequestState.PENDING, RequestState.RECEIVING, RequestState.RECEIVED]
        assert req.data == b"hello"

    @responses.activate
    def test_not_found(self):
        responses.add(responses.GET, URL, body="not found", status=404)

        req = Request(URL, data_type="json").submit()

        assert req.state is RequestState.FAILED
        assert req.error == "not found"
        assert isinstance(req.exception, ProtocolError)

    @responses.activate
    def test_post_body_sent(self):
        responses.add(responses.POST, URL, json={"id": 1}, status=201)

        req = Request(URL, method="POST", content_type="application/json", data_type="json")
        req.submit({"name": "John"})

        assert req.data == {"id": 1}
        sent = responses.calls[0].request
        assert sent.body == b'{"name": "John"}'
        assert sent.headers["content-type"] == "application/json"

    @responses.activate
    def test_get_body_not_sent(self):
        responses.add(responses.GET, URL, body=b"ok")
        Request(URL).submit("payload")
        assert responses.calls[0].request.body is None

    @responses.activate
    def test_connection_close_without_keep_alive(self):
        responses.add(responses.GET, URL, body=b"ok")
        Request(URL).submit()
        assert responses.calls[0].request.headers["Connection"] == "close"

    @responses.activate
    def test_keep_alive_keeps_connection_header(self):
        responses.add(responses.GET, URL, body=b"ok")
        Request(URL, keep_alive=5000).submit()
        assert responses.calls[0].request.headers.get("Connection") != "close"

    @responses.activate
    def test_redirect_not_followed(self):
        responses.add(
            responses.GET, URL, status=302, headers={"Location": "https://api.example.com/other"}
        )
        req = Request(URL).submit()
        assert req.state is RequestState.RECEIVED
        assert req.status_code == 302
        assert len(responses.calls) == 1

    @responses.activate
    def test_connection_error(self):
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("Connection refused")
        )
        outcomes = []

        req = Request(URL, callback=lambda error, data: outcomes.append(error)).submit()

        assert req.state is RequestState.FAILED
        assert isinstance(req.exception, ConnectionError)
        assert "Connection refused" in req.error
        assert outcomes == [req.exception]

    @responses.activate
    def test_abort_from_response_observer(self):
        responses.add(responses.GET, URL, body=b"never read")
        chunks = []

        req = Request(URL)
        req.on("response", lambda request: request.abort())
        req.on("chunk", lambda chunk: chunks.append(chunk))
        req.submit()

        assert req.state is RequestState.ABORTED
        assert req.chunks == ()
        assert chunks == []
        assert req.transport.aborted

    @responses.activate
    def test_shared_session_not_closed(self):
        responses.add(responses.GET, URL, body=b"ok")
        session = requests.Session()

        req = Request(URL, transport=RequestsTransport(session)).submit()

        assert req.data == b"ok"
        # Still usable
        responses.add(responses.GET, URL, body=b"again")
        assert session.get(URL).content == b"again"
        session.close()


class _UnencodableSession(requests.Session):
    """Session whose request fails outside the requests exception tree."""

    def request(self, *args, **kwargs):
        raise UnicodeEncodeError("latin-1", "Жора", 0, 4, "ordinal not in range(256)")


class TestUnexpectedErrors:
    """Ошибки вне иерархии requests всё равно завершают запрос."""

    def test_error_before_response(self):
        outcomes = []
        session = _UnencodableSession()

        req = Request(URL, transport=RequestsTransport(session),
                      callback=lambda error, data: outcomes.append(error)).submit()

        assert req.state is RequestState.FAILED
        assert type(req.exception) is TransportError
        assert "latin-1" in req.error
        assert outcomes == [req.exception]
        with pytest.raises(TransportError):
            req.result()
        session.close()

    @responses.activate
    def test_error_while_reading_body(self, monkeypatch):
        responses.add(responses.GET, URL, body=b"partial")

        def broken_iter_content(self, chunk_size=1, decode_unicode=False):
            raise RuntimeError("decoder blew up")

        monkeypatch.setattr(requests.Response, "iter_content", broken_iter_content)

        req = Request(URL).submit()

        assert req.state is RequestState.FAILED
        assert req.status_code == 200
        assert type(req.exception) is TransportError
        assert "decoder blew up" in req.error

    @responses.activate
    def test_abort_closes_body_stream(self):
        responses.add(responses.GET, URL, body=b"never read")
        closed = []

        def abort_and_inspect(request):
            request.abort()
            closed.append(request.transport._response.raw.closed)

        req = Request(URL)
        req.on("response", abort_and_inspect)
        req.submit()

        assert closed == [True]
        assert req.state is RequestState.ABORTED


class TestKeepAlive:

    def test_socket_options(self):
        options = keep_alive_socket_options(30000)
        assert (socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1) in options
        if hasattr(socket, "TCP_KEEPIDLE"):
            assert (socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, 30) in options

    def test_sub_second_interval_rounded_up(self):
        options = keep_alive_socket_options(200)
        if hasattr(socket, "TCP_KEEPIDLE"):
            assert (socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, 1) in options

    def test_adapter_pool_uses_socket_options(self):
        adapter = KeepAliveAdapter(10000)
        assert adapter.poolmanager.connection_pool_kw["socket_options"] == adapter.socket_options

    def test_session_mounts_keep_alive_adapter(self):
        transport = RequestsTransport()
        Request(URL, keep_alive=10000, transport=transport)
        session = transport._create_session()
        assert isinstance(session.get_adapter(URL), KeepAliveAdapter)
        session.close()
