import asyncio
import socket
import time

from tcp.conn import Connection
from tcp.state import RunConfig


def make_config(**kw) -> RunConfig:
    values = dict(host="127.0.0.1", port=0, shost="127.0.0.1", sport=0, size=100, nconn=1)
    values.update(kw)
    return RunConfig(**values)


def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


async def connection_pair():
    """Return (server, client side Connection, server side Connection)."""
    accepted = asyncio.get_running_loop().create_future()

    def on_connect(reader, writer):
        accepted.set_result(Connection(reader, writer))

    server = await asyncio.start_server(on_connect, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    peer = await asyncio.wait_for(accepted, 5)
    return server, Connection(reader, writer), peer


async def wait_until(predicate, timeout=5.0, step=0.01):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(step)


class FakeWriter:
    def __init__(self, drain_error=None):
        self.drain_error = drain_error
        self.writes = 0
        self.close_calls = 0

    def get_extra_info(self, name, default=None):
        return {"peername": ("10.0.0.2", 4000), "sockname": ("10.0.0.1", 5000)}.get(name, default)

    def write(self, data):
        self.writes += 1

    async def drain(self):
        if self.drain_error is not None:
            raise self.drain_error

    def close(self):
        self.close_calls += 1

    async def wait_closed(self):
        pass


class FakeReader:
    def __init__(self, error):
        self.error = error

    async def read(self, n=-1):
        raise self.error
