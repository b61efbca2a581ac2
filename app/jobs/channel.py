"""In-process fan-out from a running job to its live observer."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from app.jobs.frames import Frame


class ChannelClosedError(RuntimeError):
  """Raised when a frame is published after the terminal frame."""


class ProgressChannel:
  """Unbounded, ordered frame queue with exactly one terminal frame.

  Publishing never blocks, so a job keeps running when nobody reads the
  channel. Iteration yields frames in publish order and stops right after the
  terminal frame.
  """

  def __init__(self) -> None:
    self._queue: asyncio.Queue[Frame] = asyncio.Queue()
    self._terminal: Frame | None = None
    self._published = 0

  @property
  def closed(self) -> bool:
    return self._terminal is not None

  @property
  def terminal_frame(self) -> Frame | None:
    return self._terminal

  @property
  def published_count(self) -> int:
    return self._published

  def publish(self, frame: Frame) -> None:
    """Queue one frame; a terminal frame closes the channel."""
    if self._terminal is not None:
      raise ChannelClosedError(f"Channel already closed by a {self._terminal.type} frame.")

    self._queue.put_nowait(frame)
    self._published += 1
    if frame.terminal:
      self._terminal = frame

  async def __aiter__(self) -> AsyncIterator[Frame]:
    while True:
      frame = await self._queue.get()
      yield frame
      if frame.terminal:
        return

  def drain(self) -> list[Frame]:
    """Return every frame currently buffered without waiting."""
    frames: list[Frame] = []
    while not self._queue.empty():
      frames.append(self._queue.get_nowait())
    return frames
