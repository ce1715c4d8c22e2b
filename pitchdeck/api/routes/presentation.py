from fastapi import APIRouter, Depends, status

from pitchdeck.api.dependencies import get_app_controller
from pitchdeck.api.schemas import AppSnapshot
from pitchdeck.application.app_controller import AppController
from pitchdeck.infra.config.logging_config import get_logger

router = APIRouter(prefix="/presentation", tags=["presentation"])
log = get_logger("api.presentation")


@router.get("", response_model=AppSnapshot)
async def get_presentation(
    controller: AppController = Depends(get_app_controller),
) -> AppSnapshot:
    return AppSnapshot(**controller.snapshot())


@router.post("/generate", response_model=AppSnapshot, status_code=status.HTTP_202_ACCEPTED)
async def generate(
    controller: AppController = Depends(get_app_controller),
) -> AppSnapshot:
    """
    Start generating the presentation.

    Returns immediately in ``generating``; progress and the outcome arrive on
    the event stream.
    """
    controller.start_generation()
    log.info("presentation.generate.accepted")
    return AppSnapshot(**controller.snapshot())


@router.post("/retry", response_model=AppSnapshot)
async def retry(controller: AppController = Depends(get_app_controller)) -> AppSnapshot:
    controller.retry()
    return AppSnapshot(**controller.snapshot())


@router.post("/reset", response_model=AppSnapshot)
async def reset(controller: AppController = Depends(get_app_controller)) -> AppSnapshot:
    controller.reset()
    return AppSnapshot(**controller.snapshot())
