import asyncio

from core.logger import log
from tcp.conn import Connection

# how a peer close surfaces on the sending side
PEER_CLOSED = (BrokenPipeError, ConnectionResetError)


async def read_pump(conn: Connection, size: int):
    """Read and discard everything the peer sends until it goes away.

    Returns ``None`` on a clean end-of-stream, re-raises any other I/O
    error. The connection is closed exactly once on every exit path.
    """
    conn.set_read_buffer(size)
    try:
        while True:
            data = await conn.reader.read(size)
            if not data:
                log.info(f"Client {conn.peer} disconnected, {conn.nbytes} bytes received")
                return None
            conn.nbytes += len(data)
            await asyncio.sleep(0)
    except OSError as e:
        log.error(f"Failed reading bytes from conn {conn} with error {e!r}")
        raise
    finally:
        await conn.close()


async def write_pump(conn: Connection, payload: bytes):
    """Write ``payload`` to the peer over and over until it goes away."""
    conn.set_write_buffer(len(payload))
    try:
        while True:
            conn.writer.write(payload)
            await conn.writer.drain()
            conn.nbytes += len(payload)
            await asyncio.sleep(0)
    except PEER_CLOSED:
        log.info(f"Client {conn.peer} disconnected, {conn.nbytes} bytes sent")
        return None
    except OSError as e:
        log.error(f"Failed writing bytes to conn {conn} with error {e!r}")
        raise
    finally:
        await conn.close()
