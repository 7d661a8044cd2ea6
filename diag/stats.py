"""Periodic runtime health report.

Every ``interval`` seconds the report logs how many asyncio tasks and OS
threads are alive, how much memory the process holds, and what the garbage
collector has been doing. Process memory comes from :mod:`psutil`, sizes are
rendered with :mod:`humanize`.
"""

import asyncio
import gc
import sys
import threading
import time
import tracemalloc
from dataclasses import dataclass
from datetime import datetime

import humanize
import psutil

from core.config import STATS_INTERVAL
from core.logger import log

_process = psutil.Process()
_last_gc: float | None = None
_installed = False


def _on_gc(phase, info):
    global _last_gc
    if phase == "stop":
        _last_gc = time.time()


def install():
    global _installed
    if not _installed:
        gc.callbacks.append(_on_gc)
        _installed = True


@dataclass
class RuntimeStats:
    tasks: int
    threads: int
    sys_bytes: int
    used_bytes: int
    traced_bytes: int | None
    blocks: int
    gc_enabled: bool
    num_gc: int
    collected: int
    uncollectable: int
    last_gc: float | None
    next_gc: int


def collect() -> RuntimeStats:
    install()
    try:
        tasks = len(asyncio.all_tasks())
    except RuntimeError:
        tasks = 0
    memory = _process.memory_info()
    generations = gc.get_stats()
    traced = tracemalloc.get_traced_memory()[0] if tracemalloc.is_tracing() else None
    threshold = gc.get_threshold()[0]
    return RuntimeStats(
        tasks=tasks,
        threads=threading.active_count(),
        sys_bytes=memory.vms,
        used_bytes=memory.rss,
        traced_bytes=traced,
        blocks=sys.getallocatedblocks(),
        gc_enabled=gc.isenabled(),
        num_gc=sum(g["collections"] for g in generations),
        collected=sum(g["collected"] for g in generations),
        uncollectable=sum(g["uncollectable"] for g in generations),
        last_gc=_last_gc,
        next_gc=max(threshold - gc.get_count()[0], 0),
    )


def report(stats: RuntimeStats):
    last = datetime.fromtimestamp(stats.last_gc).isoformat() if stats.last_gc else "never"
    log.info(f"# tasks        : {stats.tasks}")
    log.info(f"# threads      : {stats.threads}")
    log.info(f"Memory Acquired: {humanize.naturalsize(stats.sys_bytes)}")
    log.info(f"Memory Used    : {humanize.naturalsize(stats.used_bytes)}")
    if stats.traced_bytes is not None:
        log.info(f"Memory Traced  : {humanize.naturalsize(stats.traced_bytes)}")
    log.info(f"# blocks       : {stats.blocks}")
    log.info(f"# collected    : {stats.collected}")
    log.info(f"# uncollectable: {stats.uncollectable}")
    log.info(f"GC enabled     : {stats.gc_enabled}")
    log.info(f"# GC           : {stats.num_gc}")
    log.info(f"Last GC time   : {last}")
    log.info(f"Next GC        : after {stats.next_gc} allocations")


async def run(interval: float = STATS_INTERVAL):
    install()
    while True:
        await asyncio.sleep(interval)
        report(collect())
