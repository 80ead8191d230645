"""
Diagnostic sinks for per-tick reports.

The controller describes each decision as a TickReport and hands it to an
optional sink: nothing, the log, an in-memory list, or an HTTP endpoint
for a live viewer. Sinks are write-only and must never slow down or break
a tick, so emit_safely() swallows whatever a sink raises.
"""

import json
import logging
import queue
import threading
import time
from typing import Optional

import httpx
from pydantic import BaseModel

logger = logging.getLogger('arenabot.diagnostics')

_STOP = object()


class TickReport(BaseModel):
    """What the controller decided this tick and why."""
    tick: int
    unit_id: int
    goal: str
    secondary_goal: Optional[str] = None
    position: tuple[float, float]
    target: tuple[float, float]
    aim: tuple[float, float]
    velocity: float
    jump: bool
    shoot: bool
    reload: bool
    swap_weapon: bool
    elapsed_ms: float = 0.0

    def to_text(self):
        secondary = f" [{self.secondary_goal}]" if self.secondary_goal else ""
        return (f"tick {self.tick} unit {self.unit_id}: {self.goal}{secondary} "
                f"pos=({self.position[0]:.2f}, {self.position[1]:.2f}) "
                f"target=({self.target[0]:.2f}, {self.target[1]:.2f}) "
                f"v={self.velocity:.2f} jump={self.jump} shoot={self.shoot}")


class NullDiagnostics:
    def emit(self, report):
        pass


class LoggingDiagnostics:
    """Writes one line per tick to the arenabot.diagnostics logger."""

    def __init__(self, level=logging.DEBUG):
        self.level = level

    def emit(self, report):
        logger.log(self.level, report.to_text())


class RecordingDiagnostics:
    """Keeps the most recent reports in memory (tests, replays)."""

    def __init__(self, limit=1000):
        self.limit = limit
        self.reports = []

    def emit(self, report):
        self.reports.append(report)
        if len(self.reports) > self.limit:
            self.reports = self.reports[-self.limit:]

    @property
    def last(self):
        return self.reports[-1] if self.reports else None


class HttpDiagnostics:
    """Posts each report as JSON to a viewer endpoint.

    Disabled when no URL is given. emit() only queues the report; a worker
    thread owned by the sink does the POSTs so a slow viewer never holds up
    a tick. When the queue is full the report is dropped.
    """

    def __init__(self, url, match_id=None, timeout=0.05, client=None, queue_size=256):
        self.url = url
        self.match_id = match_id
        self.dropped = 0
        self._enabled = bool(url)
        self._client = client or (httpx.Client(timeout=timeout) if self._enabled else None)
        self._queue = queue.Queue(maxsize=queue_size)
        self._worker = None
        if self._enabled:
            self._worker = threading.Thread(target=self._run, name='arenabot-diagnostics',
                                            daemon=True)
            self._worker.start()

    def emit(self, report):
        if not self._enabled:
            return
        payload = {
            'type': 'tick',
            'match_id': self.match_id,
            'timestamp': time.time(),
            'data': report.model_dump(mode='json'),
        }
        try:
            self._queue.put_nowait(payload)
        except queue.Full:
            self.dropped += 1
            logger.debug(f"Diagnostic queue full, dropped tick {report.tick}")

    def flush(self):
        """Block until every queued report has been sent (or failed)."""
        if self._worker is not None:
            self._queue.join()

    def _run(self):
        while True:
            payload = self._queue.get()
            try:
                if payload is _STOP:
                    return
                self._send(payload)
            finally:
                self._queue.task_done()

    def _send(self, payload):
        try:
            self._client.post(
                self.url,
                content=json.dumps(payload).encode('utf-8'),
                headers={
                    'Content-Type': 'application/json',
                    'User-Agent': 'ArenaBot-Diagnostics/1.0',
                },
            )
        except httpx.HTTPError as e:
            logger.debug(f"Diagnostic post failed: {e}")

    def close(self, timeout=1.0):
        """Stop the worker, then close the HTTP client."""
        if self._worker is not None:
            try:
                self._queue.put(_STOP, timeout=timeout)
            except queue.Full:
                logger.warning("Diagnostic worker did not drain its queue")
            self._worker.join(timeout)
            if self._worker.is_alive():
                logger.warning("Diagnostic worker still busy at close")
            self._worker = None
        if self._client is not None:
            self._client.close()


def emit_safely(sink, report):
    """Hand a report to the sink; a failing sink never fails the tick."""
    if sink is None:
        return
    try:
        sink.emit(report)
    except Exception as e:
        logger.debug(f"Diagnostic sink {type(sink).__name__} failed: {e}")
