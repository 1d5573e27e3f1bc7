"""
Publish routes: run the composer workflow server-side.

The composer state travels as a JSON `payload` form field next to the
selected `files`, so one multipart request carries everything.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..auth import AuthUser, get_required_user
from ..config import get_settings
from ..database import get_db
from ..dependencies import get_dispatcher
from ..limiter import limiter
from ..logging_config import api_logger
from ..posting.dispatcher import PostingDispatcher
from ..posting.notify import CollectingNotifier
from ..posting.reconcile import Reconciler
from ..posting.uploader import MediaUploader
from ..posting.workflow import PublishWorkflow
from ..responses import validation_error
from ..schemas.publish import ComposerPayload, PublishResponse, ScheduleResponse
from ..services.storage import StorageClient, get_storage
from .upload import read_files

settings = get_settings()

router = APIRouter(prefix="/api/publish", tags=["publish"])


def parse_payload(payload: str) -> ComposerPayload:
    try:
        return ComposerPayload.model_validate_json(payload)
    except ValidationError as e:
        validation_error(
            "Invalid composer payload",
            {"errors": e.errors(include_url=False, include_context=False)},
        )


def build_workflow(db: Session, storage: StorageClient, dispatcher: PostingDispatcher,
                   user_id: str, notifier: CollectingNotifier) -> PublishWorkflow:
    return PublishWorkflow(
        dispatcher,
        MediaUploader(storage, notifier),
        Reconciler(db, storage, user_id),
        notifier,
        settings=settings,
    )


@router.post("", response_model=PublishResponse)
@limiter.limit(settings.publish_rate_limit)
async def publish_now(
    request: Request,
    payload: str = Form(...),
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    dispatcher: PostingDispatcher = Depends(get_dispatcher),
    current_user: AuthUser = Depends(get_required_user),
):
    """Validate, upload, post to every selected platform and reconcile."""
    composer = parse_payload(payload)
    state = composer.to_state(await read_files(files or []))

    notifier = CollectingNotifier()
    workflow = build_workflow(db, storage, dispatcher, current_user.id, notifier)
    outcome = await run_in_threadpool(workflow.publish, state)

    api_logger.info(
        "Publish finished",
        user_id=current_user.id,
        allowed=outcome.allowed,
        succeeded=sum(1 for r in outcome.results if r.success),
        total=len(outcome.results),
        timed_out=outcome.timed_out,
    )
    return PublishResponse(
        ok=outcome.allowed and outcome.all_succeeded,
        blocked=not outcome.allowed,
        message=outcome.message,
        results=[r.to_dict() for r in outcome.results],
        progress=outcome.progress,
        notices=notifier.to_list(),
        media_urls=outcome.media_urls,
        timed_out=outcome.timed_out,
        draft_deleted=outcome.draft_deleted,
    )


@router.post("/schedule", response_model=ScheduleResponse)
@limiter.limit(settings.publish_rate_limit)
async def publish_later(
    request: Request,
    payload: str = Form(...),
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    dispatcher: PostingDispatcher = Depends(get_dispatcher),
    current_user: AuthUser = Depends(get_required_user),
):
    """Validate and upload now; the cron worker posts at `scheduledFor`."""
    composer = parse_payload(payload)
    state = composer.to_state(await read_files(files or []))

    notifier = CollectingNotifier()
    workflow = build_workflow(db, storage, dispatcher, current_user.id, notifier)
    outcome = await run_in_threadpool(workflow.schedule, state)

    return ScheduleResponse(
        ok=outcome.allowed and outcome.error is None,
        blocked=not outcome.allowed,
        message=outcome.message,
        scheduled_post_id=outcome.scheduled_post_id,
        media_urls=outcome.media_urls,
        notices=notifier.to_list(),
    )
