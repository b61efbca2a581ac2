"""Server-sent events binding for a job's progress channel."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi.responses import StreamingResponse

from app.core.json import dumps
from app.jobs.channel import ProgressChannel
from app.jobs.frames import Frame

logger = logging.getLogger(__name__)

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"}


def encode_frame(frame: Frame) -> bytes:
  """Render one frame as a ``data:`` event."""
  return f"data: {dumps(frame.as_dict())}\n\n".encode()


async def stream_frames(channel: ProgressChannel, *, job_id: str | None = None) -> AsyncIterator[bytes]:
  """Yield encoded frames until the channel's terminal frame.

  Stopping early (client gone) only stops reading; the job task is not touched.
  """
  sent = 0
  try:
    async for frame in channel:
      yield encode_frame(frame)
      sent += 1
  finally:
    if not channel.closed or sent < channel.published_count:
      logger.info("Stream closed before the terminal frame job_id=%s frames_sent=%d", job_id, sent)


def sse_response(channel: ProgressChannel, *, job_id: str | None = None) -> StreamingResponse:
  headers = dict(SSE_HEADERS)
  if job_id:
    headers["X-Improvement-Id"] = job_id
  return StreamingResponse(stream_frames(channel, job_id=job_id), media_type=SSE_MEDIA_TYPE, headers=headers)
