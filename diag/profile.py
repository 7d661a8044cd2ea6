import asyncio
import cProfile
import itertools
import sys
import threading
import traceback
import tracemalloc

from core.config import PROFILE_PERIOD
from core.logger import log


def _dump_stacks(path: str):
    frames = sys._current_frames()
    with open(path, "w") as f:
        threads = threading.enumerate()
        f.write(f"threads: {len(threads)}\n")
        for thread in threads:
            f.write(f"\n--- thread {thread.name} (ident={thread.ident}, daemon={thread.daemon})\n")
            frame = frames.get(thread.ident)
            if frame is not None:
                f.writelines(traceback.format_stack(frame))

        tasks = asyncio.all_tasks()
        f.write(f"\ntasks: {len(tasks)}\n")
        for task in tasks:
            f.write(f"\n--- task {task.get_name()}\n")
            for frame in task.get_stack():
                f.writelines(traceback.format_stack(frame, limit=1))


async def capture(prefix: str, seq: int, period: float):
    """Write one round of cpu, heap and thread profiles."""
    if not tracemalloc.is_tracing():
        tracemalloc.start()
    cpu_path = f"{prefix}-cpu-{seq}.prof"
    # fail before spending a whole period profiling
    open(cpu_path, "wb").close()

    profiler = cProfile.Profile()
    profiler.enable()
    try:
        await asyncio.sleep(period)
    finally:
        profiler.disable()
    profiler.dump_stats(cpu_path)

    tracemalloc.take_snapshot().dump(f"{prefix}-heap-{seq}.prof")
    _dump_stacks(f"{prefix}-threadcreate-{seq}.prof")
    log.info(f"Created CPU, heap and threadcreate profile of {period} seconds")


async def run(prefix: str, period: float = PROFILE_PERIOD):
    for seq in itertools.count(1):
        await capture(prefix, seq, period)
