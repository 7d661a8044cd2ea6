import asyncio
import logging

import pytest

from helpers import make_config, unused_port
from tcp.client import Dialer


async def _idle_server():
    held = []

    def on_connect(reader, writer):
        held.append(writer)

    server = await asyncio.start_server(on_connect, "127.0.0.1", 0)
    return server, held


def test_all_dials_succeed_spawn_one_pump_each():
    async def scenario():
        server, held = await _idle_server()
        port = server.sockets[0].getsockname()[1]
        dialer = Dialer(make_config(port=port, nconn=5))
        conns = await dialer.connect_and_go()
        running = len(dialer.tasks)
        await asyncio.sleep(0.05)
        still_running = sum(not t.done() for t in dialer.tasks)
        dialer.close()
        server.close()
        return conns, running, still_running

    conns, running, still_running = asyncio.run(scenario())
    assert len(conns) == 5
    assert running == 5
    assert still_running == 5
    assert len({c.local for c in conns}) == 5


def test_failed_dial_aborts_startup(monkeypatch, caplog):
    real_open = asyncio.open_connection
    opened = []

    async def flaky_open(*args, **kwargs):
        if len(opened) == 2:
            raise ConnectionRefusedError(111, "Connection refused")
        reader, writer = await real_open(*args, **kwargs)
        opened.append(writer)
        return reader, writer

    monkeypatch.setattr(asyncio, "open_connection", flaky_open)

    async def scenario():
        server, _ = await _idle_server()
        port = server.sockets[0].getsockname()[1]
        dialer = Dialer(make_config(port=port, nconn=3))
        try:
            with pytest.raises(ConnectionRefusedError):
                await dialer.connect_and_go()
            return len(dialer.tasks)
        finally:
            server.close()

    assert asyncio.run(scenario()) == 0
    assert len(opened) == 2
    assert all(w.is_closing() for w in opened)
    assert "Failed to connect to tcp server" in caplog.text


def test_refused_target_is_reported(caplog):
    run = make_config(port=unused_port(), nconn=2)

    with pytest.raises(ConnectionRefusedError):
        asyncio.run(Dialer(run).connect_and_go())
    assert f"on address {run.addr_text}" in caplog.text


def test_connections_are_logged_in_order(caplog):
    caplog.set_level(logging.INFO)

    async def scenario():
        server, _ = await _idle_server()
        port = server.sockets[0].getsockname()[1]
        dialer = Dialer(make_config(port=port, nconn=3))
        conns = await dialer.connect_and_go()
        dialer.close()
        server.close()
        return conns

    conns = asyncio.run(scenario())
    lines = [r.getMessage() for r in caplog.records if "connected to" in r.getMessage()]
    assert lines == [f"Client {c.local} connected to {c.peer}" for c in conns]
