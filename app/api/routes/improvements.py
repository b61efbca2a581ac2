import logging

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import StreamingResponse

from app.api.models import CommitErrorResponse, CommitRequest, CommitResponse, ImprovementJobResponse, ImprovementQueueResponse, ImproveRequest
from app.api.sse import sse_response
from app.config import Settings, get_settings
from app.services import improvements as improvement_service
from app.services.commit import commit_improvement
from app.storage.factory import _get_content_store

router = APIRouter()
logger = logging.getLogger("app.api.routes.improvements")

# Domain errors are rendered as {"success": false, "error": ...} by the app-level handler.
_ERROR_RESPONSES = {
  status.HTTP_400_BAD_REQUEST: {"model": CommitErrorResponse},
  status.HTTP_404_NOT_FOUND: {"model": CommitErrorResponse},
  status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": CommitErrorResponse},
}


@router.post("/content/{content_type}/{content_id}/improve", response_class=StreamingResponse, response_model=None, responses={status.HTTP_400_BAD_REQUEST: {"model": CommitErrorResponse}})
async def start_improvement(  # noqa: B008
  content_type: str,
  content_id: str,
  payload: ImproveRequest | None = Body(default=None),  # noqa: B008
  settings: Settings = Depends(get_settings),  # noqa: B008
) -> StreamingResponse:
  """Start an improvement job and stream its progress as server-sent events."""
  target = improvement_service.resolve_target(content_type, content_id, payload.field if payload else None)
  job, channel = await improvement_service.start_improvement(target, settings)
  logger.info("Streaming improvement job_id=%s", job.job_id)
  return sse_response(channel, job_id=job.job_id)


@router.put("/content/{content_type}/{content_id}/improve", response_model=CommitResponse, responses=_ERROR_RESPONSES)
async def commit(  # noqa: B008
  content_type: str,
  content_id: str,
  payload: CommitRequest,
  settings: Settings = Depends(get_settings),  # noqa: B008
) -> CommitResponse:
  """Write the accepted improved text back to the content item."""
  store = _get_content_store(settings)
  entity = await commit_improvement(store, content_type, content_id, payload.field, payload.improved_content, payload.quality_score)
  return CommitResponse(entity=entity)


@router.get("/improvements", response_model=ImprovementQueueResponse)
async def list_improvements(  # noqa: B008
  status_filter: str | None = Query(default=None, alias="status"),  # noqa: B008
  content_type: str | None = Query(default=None),  # noqa: B008
  limit: int = Query(default=20, ge=1, le=100),  # noqa: B008
  offset: int = Query(default=0, ge=0),  # noqa: B008
  settings: Settings = Depends(get_settings),  # noqa: B008
) -> ImprovementQueueResponse:
  """Return queue statistics and recent improvement jobs."""
  payload = await improvement_service.get_improvement_queue(settings, limit=limit, offset=offset, status_filter=status_filter, content_type=content_type)
  return ImprovementQueueResponse.model_validate(payload)


@router.get("/improvements/{job_id}", response_model=ImprovementJobResponse)
async def get_improvement(  # noqa: B008
  job_id: str,
  settings: Settings = Depends(get_settings),  # noqa: B008
) -> ImprovementJobResponse:
  """Fetch the persisted state of one improvement job."""
  record = await improvement_service.get_improvement(job_id, settings)
  return ImprovementJobResponse.model_validate(record)
