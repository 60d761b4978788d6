"""Tests for the aiohttp transport against a local test server."""

import asyncio
import socket

import pytest
from aiohttp import web
from aiohttp import test_utils

from blastr.core.errors import TransportError
from blastr.transport import BlastTransport


def _unused_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def received():
    return {}


@pytest.fixture
def app(received):
    async def handle_post(request):
        received["form"] = dict(await request.post())
        received["user_agent"] = request.headers.get("User-Agent")
        return web.Response(text="    RID = ABC123\n    RTOE = 17\n")

    async def handle_get(request):
        received["query"] = dict(request.query)
        received["query_string"] = request.query_string
        if request.query.get("RID") == "broken":
            return web.Response(status=500, text="Internal error")
        if request.query.get("RID") == "garbled":
            return web.Response(body=b"\tStatus=\xff\xfeREADY\n", content_type="text/plain", charset="utf-8")
        if request.query.get("RID") == "slow":
            await asyncio.sleep(1)
        return web.Response(text="\tStatus=READY\n")

    application = web.Application()
    application.router.add_post("/blast/Blast.cgi", handle_post)
    application.router.add_get("/blast/Blast.cgi", handle_get)
    return application


class TestBlastTransport:
    """Test request shapes and error wrapping."""

    @pytest.mark.asyncio
    async def test_post_form_sends_fields(self, app, received):
        async with test_utils.TestServer(app) as server:
            transport = BlastTransport(str(server.make_url("/blast/Blast.cgi")), user_agent="blastr/test")
            body = await transport.post_form(
                {"CMD": "Put", "PROGRAM": "blastp&MEGABLAST=on", "DATABASE": "nr", "QUERY": "%3Eseq%0AMKT"}
            )

        assert "RID = ABC123" in body
        assert received["form"] == {
            "CMD": "Put",
            "PROGRAM": "blastp&MEGABLAST=on",
            "DATABASE": "nr",
            "QUERY": "%3Eseq%0AMKT",
        }
        assert received["user_agent"] == "blastr/test"

    @pytest.mark.asyncio
    async def test_get_sends_params_in_order(self, app, received):
        async with test_utils.TestServer(app) as server:
            transport = BlastTransport(str(server.make_url("/blast/Blast.cgi")))
            body = await transport.get({"CMD": "Get", "FORMAT_OBJECT": "SearchInfo", "RID": "ABC123"})

        assert body == "\tStatus=READY\n"
        assert received["query_string"] == "CMD=Get&FORMAT_OBJECT=SearchInfo&RID=ABC123"

    @pytest.mark.asyncio
    async def test_http_error_status_raises_transport_error(self, app):
        async with test_utils.TestServer(app) as server:
            url = str(server.make_url("/blast/Blast.cgi"))
            transport = BlastTransport(url)
            with pytest.raises(TransportError) as exc:
                await transport.get({"CMD": "Get", "RID": "broken"})

        assert exc.value.url == url
        assert exc.value.__cause__ is exc.value.cause

    @pytest.mark.asyncio
    async def test_undecodable_body_raises_transport_error(self, app):
        async with test_utils.TestServer(app) as server:
            transport = BlastTransport(str(server.make_url("/blast/Blast.cgi")))
            with pytest.raises(TransportError) as exc:
                await transport.get({"CMD": "Get", "FORMAT_OBJECT": "SearchInfo", "RID": "garbled"})

        assert isinstance(exc.value.cause, UnicodeDecodeError)
        assert exc.value.details["cause"] == "UnicodeDecodeError"

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self, app):
        async with test_utils.TestServer(app) as server:
            transport = BlastTransport(str(server.make_url("/blast/Blast.cgi")), timeout=0.05)
            with pytest.raises(TransportError):
                await transport.get({"CMD": "Get", "RID": "slow"})

    @pytest.mark.asyncio
    async def test_connection_refused_raises_transport_error(self):
        transport = BlastTransport(f"http://127.0.0.1:{_unused_port()}/blast/Blast.cgi")
        with pytest.raises(TransportError) as exc:
            await transport.post_form({"CMD": "Put"})
        assert exc.value.error_code == "TRANSPORT_ERROR"
