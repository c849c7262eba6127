"""Single background worker that runs conversation jobs off the UI thread."""

import time
import asyncio
import logging
import threading
import queue
from typing import Any, Callable, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)


class PipelineJob(NamedTuple):
    """A job to be run by the worker thread."""
    name: str
    func: Callable[..., Any]
    args: Tuple[Any, ...]


class PipelineWorker:
    """Runs queued jobs one at a time on a worker thread that owns an asyncio loop.

    A job is any callable; if it returns a coroutine, the coroutine is run to
    completion on the worker's loop before the next job starts.
    """

    def __init__(self, name: str = "pipeline"):
        self.name = name
        self.task_queue: "queue.Queue[Optional[PipelineJob]]" = queue.Queue()
        self.worker_thread: Optional[threading.Thread] = None
        self.shutdown_event = threading.Event()
        self.jobs_completed = 0

    def start(self) -> None:
        """Start the worker thread."""
        if self.worker_thread and self.worker_thread.is_alive():
            return
        self.shutdown_event.clear()
        self.worker_thread = threading.Thread(target=self._worker_loop, daemon=True)
        self.worker_thread.name = f"worker_{self.name}"
        self.worker_thread.start()
        logger.info(f"Started {self.name} worker")

    def _worker_loop(self) -> None:
        """The main loop for the worker thread. Initializes an asyncio loop."""
        thread_name = threading.current_thread().name
        logger.debug(f"Worker thread {thread_name} starting")

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        try:
            while True:
                job = self.task_queue.get()

                if job is None:
                    logger.debug(f"Worker {thread_name} received sentinel, exiting.")
                    self.task_queue.task_done()
                    break

                logger.debug(f"Worker {thread_name} running job {job.name}")
                try:
                    result = job.func(*job.args)
                    if asyncio.iscoroutine(result):
                        loop.run_until_complete(result)
                except Exception as e:
                    logger.error(f"Unhandled exception in job {job.name}: {e}", exc_info=True)
                finally:
                    self.jobs_completed += 1
                    self.task_queue.task_done()
        finally:
            loop.close()
            logger.debug(f"Worker thread {thread_name} exiting and closing its event loop.")

    def submit(self, name: str, func: Callable[..., Any], *args: Any) -> bool:
        """Queue a job. Returns False if the worker is shutting down."""
        if self.shutdown_event.is_set():
            logger.warning(f"{self.name} worker is shutting down, dropping job {name}")
            return False
        self.task_queue.put(PipelineJob(name=name, func=func, args=args))
        return True

    @property
    def is_busy(self) -> bool:
        return self.task_queue.unfinished_tasks > 0

    def wait_idle(self, timeout: float = 30.0) -> bool:
        """Block until all queued jobs have finished. Returns False on timeout."""
        start_time = time.time()
        while self.is_busy:
            if time.time() - start_time >= timeout:
                logger.warning(f"[{self.name}] Timed out waiting for "
                               f"{self.task_queue.unfinished_tasks} jobs")
                return False
            time.sleep(0.05)
        return True

    def shutdown(self, timeout: float = 30.0) -> bool:
        """Finish queued jobs, then stop the worker thread."""
        logger.info(f"Shutting down {self.name} worker...")
        self.shutdown_event.set()
        drained = self.wait_idle(timeout)

        if self.worker_thread:
            self.task_queue.put(None)
            self.worker_thread.join(2.0)
            if self.worker_thread.is_alive():
                logger.warning(f"Worker thread {self.worker_thread.name} did not terminate cleanly.")
                return False
            self.worker_thread = None

        logger.info(f"{self.name} worker shutdown complete.")
        return drained
