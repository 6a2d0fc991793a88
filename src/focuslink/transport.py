"""Point-to-point transport between the paired devices.

Delivery is best effort: no acknowledgment, no retry queue, no ordering. A
send that fails is logged and forgotten; the next snapshot is the retry.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections import deque
from typing import Any, Awaitable, Callable, Deque, List, Union

import requests

logger = logging.getLogger("focuslink.transport")

ReceiveHandler = Callable[[dict], Union[Awaitable[Any], Any]]

SUMMARY_PATH = "/api/summary"


class Transport:
    """send(payload) on one side, on_receive(handler) on the other."""

    def __init__(self):
        self._handlers: List[ReceiveHandler] = []

    def send(self, payload: dict) -> None:
        raise NotImplementedError

    def on_receive(self, handler: ReceiveHandler) -> None:
        self._handlers.append(handler)

    async def dispatch(self, payload: dict) -> list:
        """Hand an inbound payload to every registered handler, in order."""
        results = []
        for handler in self._handlers:
            result = handler(payload)
            if inspect.isawaitable(result):
                result = await result
            results.append(result)
        return results


class LoopbackTransport(Transport):
    """In-process pairing. Payloads wait in a queue until deliver() runs."""

    def __init__(self):
        super().__init__()
        self.outbox: Deque[dict] = deque()

    def send(self, payload: dict) -> None:
        self.outbox.append(dict(payload))

    async def deliver(self) -> int:
        """Deliver everything queued so far. Returns the number delivered."""
        delivered = 0
        while self.outbox:
            await self.dispatch(self.outbox.popleft())
            delivered += 1
        return delivered


class HttpTransport(Transport):
    """POSTs payloads to the peer's /api/summary; the peer's FastAPI app dispatches."""

    def __init__(self, peer_url: str = None, timeout: float = 5.0, background: bool = True):
        super().__init__()
        self.peer_url = peer_url.rstrip("/") if peer_url else None
        self.timeout = timeout
        self.background = background

    def send(self, payload: dict) -> None:
        if not self.peer_url:
            logger.debug("No peer configured, summary not sent")
            return
        if self.background:
            # The POST must not hold up the timer's event loop
            threading.Thread(target=self._post, args=(dict(payload),), daemon=True).start()
        else:
            self._post(payload)

    def _post(self, payload: dict) -> None:
        try:
            resp = requests.post(f"{self.peer_url}{SUMMARY_PATH}", json=payload, timeout=self.timeout)
            if resp.status_code >= 400:
                logger.warning(f"Peer rejected summary: HTTP {resp.status_code}")
            else:
                logger.debug(f"Summary sent for {payload.get('ymd')}")
        except requests.RequestException as e:
            logger.warning(f"Summary send failed: {e}")
