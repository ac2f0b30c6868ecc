"""
Paced, character-by-character reveal of an already-available string.

reveal_prefixes() is the lazy sequence; IncrementalTextRevealer runs it as a
cancelable task so that new text arriving replaces the old reveal outright.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncGenerator, Awaitable, Callable, Optional

logger = logging.getLogger("moviesearch.reveal")

DEFAULT_INTERVAL_S = 0.012

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RevealFrame:
    text: str
    done: bool


@dataclass(frozen=True)
class RevealState:
    source_text: str = ""
    revealed_length: int = 0
    done: bool = True


async def reveal_prefixes(
    text: str,
    interval: float = DEFAULT_INTERVAL_S,
    sleep: Sleep = asyncio.sleep,
) -> AsyncGenerator[RevealFrame, None]:
    """Yield prefixes of length 1..N one tick apart, then a final done frame."""
    if not text:
        yield RevealFrame("", done=True)
        return
    for length in range(1, len(text) + 1):
        await sleep(interval)
        yield RevealFrame(text[:length], done=False)
    await sleep(interval)
    yield RevealFrame(text, done=True)


class IncrementalTextRevealer:
    """Drives one reveal at a time; show() with new text restarts from zero."""

    def __init__(self, interval: float = DEFAULT_INTERVAL_S, sleep: Sleep = asyncio.sleep):
        self._interval = interval
        self._sleep = sleep
        self._state = RevealState()
        self._task: Optional[asyncio.Task[None]] = None
        self._generation = 0

    @property
    def state(self) -> RevealState:
        return self._state

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def show(self, text: str, on_frame: Callable[[RevealFrame], None]) -> None:
        """Start revealing `text`. Must be called from within the running loop."""
        if self._task is not None and text == self._state.source_text:
            return
        self.stop()
        self._generation += 1
        generation = self._generation
        self._state = RevealState(source_text=text, revealed_length=0, done=False)
        logger.debug(f"Reveal restarted ({len(text)} chars)")
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(text, generation, on_frame))

    def stop(self) -> None:
        """Cancel the current reveal. Idempotent; no frame is emitted afterwards."""
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def wait(self) -> RevealState:
        task = self._task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self._state

    async def _run(self, text: str, generation: int, on_frame: Callable[[RevealFrame], None]) -> None:
        async for frame in reveal_prefixes(text, self._interval, self._sleep):
            if generation != self._generation:
                return
            self._state = RevealState(source_text=text, revealed_length=len(frame.text), done=frame.done)
            on_frame(frame)
