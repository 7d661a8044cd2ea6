import asyncio

from core.logger import log
from tcp.conn import Connection, spawn
from tcp.pump import write_pump
from tcp.state import RunConfig


class Listener:
    """Server role: accept forever, one write pump per accepted client."""

    def __init__(self, config: RunConfig, payload: bytes):
        self.config = config
        self.payload = payload
        self.server: asyncio.Server | None = None
        self.tasks: set[asyncio.Task] = set()

    @property
    def address(self):
        if self.server is None or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[:2]

    def _on_connect(self, reader, writer):
        conn = Connection(reader, writer)
        log.info(f"Client {conn.peer} connected")
        spawn(self.tasks, write_pump(conn, self.payload), name=f"write-pump {conn.peer}")

    async def start(self):
        try:
            self.server = await asyncio.start_server(
                self._on_connect, self.config.host, self.config.port
            )
        except OSError as e:
            log.error(
                f"Failed to listen for tcp connections on address "
                f"{self.config.addr_text} with error: {e}"
            )
            raise
        log.info(f"Listening on {self.address}")

    async def serve_forever(self):
        if self.server is None:
            await self.start()
        # Server.serve_forever() would wait for every pump on shutdown,
        # and pumps only stop when their peer does
        try:
            await asyncio.get_running_loop().create_future()
        finally:
            self.close()

    def close(self):
        if self.server is not None:
            self.server.close()
        for task in list(self.tasks):
            task.cancel()
