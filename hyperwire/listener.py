"""A supervised pool of threads accepting connections from one listener."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class ListenerPool:
    """Runs a number of accepting threads, respawning any that die.

    The acceptor must offer ``clone()`` and ``accept()``.  A worker stops
    for good once its acceptor's ``accept`` raises ``StopIteration``.
    """

    def __init__(self, acceptor: Any) -> None:
        self.acceptor = acceptor

    def accept(self, work: Callable[[Any], None], threads: int) -> None:
        """Hand every accepted stream to ``work``; block until all workers stop."""
        if threads < 1:
            raise ValueError("Can't accept on 0 threads.")
        supervisor: queue.Queue[bool] = queue.Queue()
        for _ in range(threads):
            self._spawn(supervisor, work)

        running = threads
        while running:
            if supervisor.get():
                self._spawn(supervisor, work)
            else:
                running -= 1

    def _spawn(self, supervisor: queue.Queue[bool], work: Callable[[Any], None]) -> None:
        acceptor = self.acceptor.clone()
        thread = threading.Thread(
            target=_serve, args=(acceptor, work, supervisor), daemon=True
        )
        thread.start()


def _serve(acceptor: Any, work: Callable[[Any], None], supervisor: queue.Queue[bool]) -> None:
    crashed = True
    try:
        while True:
            try:
                stream = acceptor.accept()
            except StopIteration:
                crashed = False
                return
            except OSError as exc:
                logger.error("Connection failed: %s", exc)
                continue
            work(stream)
    except Exception:
        logger.exception("listener worker died; respawning")
    finally:
        supervisor.put(crashed)