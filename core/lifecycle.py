import asyncio
import logging
import os
import signal

from core.logger import log


async def wait_for_interrupt(sig: int = signal.SIGINT):
    """Block until ``sig`` is delivered to the process."""
    loop = asyncio.get_running_loop()
    received = asyncio.Event()

    try:
        loop.add_signal_handler(sig, received.set)
        remove = lambda: loop.remove_signal_handler(sig)
    except NotImplementedError:
        previous = signal.signal(sig, lambda *_: loop.call_soon_threadsafe(received.set))
        remove = lambda: signal.signal(sig, previous)

    try:
        await received.wait()
    finally:
        remove()
    log.info("CTRL-C; exiting")


def terminate(code: int = 0):
    # no drain: open connections are left to the OS
    logging.shutdown()
    os._exit(code)
