import asyncio

from core.logger import log
from tcp.conn import Connection, spawn
from tcp.pump import read_pump
from tcp.state import RunConfig


class Dialer:
    """Client role: open ``nconn`` connections, then read from all of them."""

    def __init__(self, config: RunConfig):
        self.config = config
        self.tasks: set[asyncio.Task] = set()

    async def new_connection(self) -> Connection:
        reader, writer = await asyncio.open_connection(
            self.config.host, self.config.port, local_addr=self.config.saddr
        )
        return Connection(reader, writer)

    async def connect_and_go(self) -> list[Connection]:
        conns: list[Connection] = []
        for _ in range(self.config.nconn):
            try:
                conn = await self.new_connection()
            except OSError as e:
                log.error(
                    f"Failed to connect to tcp server on address {self.config.addr_text} "
                    f"from source address: {self.config.saddr_text} Error: {e}"
                )
                for opened in conns:
                    await opened.close()
                raise
            log.info(f"Client {conn.local} connected to {conn.peer}")
            conns.append(conn)

        for conn in conns:
            spawn(self.tasks, read_pump(conn, self.config.size), name=f"read-pump {conn.local}")
        return conns

    def close(self):
        for task in list(self.tasks):
            task.cancel()
