import asyncio

from core.logger import log


class BackgroundManager:
    def __init__(self):
        self.tasks: dict[str, asyncio.Task] = {}

    def _finished(self, name: str, task: asyncio.Task):
        if self.tasks.get(name) is task:
            del self.tasks[name]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(f"[SYSTEM] {name} stopped with error: {exc!r}")

    def start(self, name: str, coro) -> asyncio.Task:
        if name in self.tasks:
            coro.close()
            raise RuntimeError(f"background task {name!r} already running")
        task = asyncio.create_task(coro, name=name)
        self.tasks[name] = task
        task.add_done_callback(lambda t: self._finished(name, t))
        return task

    async def stop(self):
        tasks = list(self.tasks.values())
        for task in tasks:
            task.cancel()
        # errors were already reported by _finished
        await asyncio.gather(*tasks, return_exceptions=True)
        self.tasks.clear()
        if tasks:
            log.info("[SYSTEM] Background tasks stopped")
