import asyncio
import socket

from core.logger import log


class Connection:
    """An established TCP stream, owned by exactly one pump."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.reader = reader
        self.writer = writer
        self.peer = writer.get_extra_info("peername")
        self.local = writer.get_extra_info("sockname")
        self.nbytes = 0
        self.closed = False

    def __repr__(self):
        return f"<Connection {self.local} -> {self.peer}>"

    def _setsockopt(self, opt: int, value: int):
        sock = self.writer.get_extra_info("socket")
        if sock is None:
            return
        try:
            sock.setsockopt(socket.SOL_SOCKET, opt, value)
        except OSError as e:
            log.debug(f"setsockopt({opt}, {value}) failed on {self}: {e}")

    def set_read_buffer(self, size: int):
        self._setsockopt(socket.SO_RCVBUF, size)

    def set_write_buffer(self, size: int):
        self._setsockopt(socket.SO_SNDBUF, size)

    async def close(self, timeout: float = 1.0):
        if self.closed:
            return
        self.closed = True
        self.writer.close()
        try:
            await asyncio.wait_for(self.writer.wait_closed(), timeout)
        except asyncio.TimeoutError:
            # peer stopped reading, unsent payload would never flush
            self.writer.transport.abort()
        except OSError as e:
            # the failure that led here has already been reported by the pump
            log.debug(f"{self} closed with {e!r}")


def _reap(tasks: set, task: asyncio.Task):
    tasks.discard(task)
    if not task.cancelled():
        # pump errors are terminal to that pump only
        task.exception()


def spawn(tasks: set, coro, name: str | None = None) -> asyncio.Task:
    task = asyncio.create_task(coro, name=name)
    tasks.add(task)
    task.add_done_callback(lambda t: _reap(tasks, t))
    return task
