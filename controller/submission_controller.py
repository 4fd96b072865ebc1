# controller/submission_controller.py
from fastapi import APIRouter, Depends, Request, status
from controller.controller_dependencies import (
    get_current_identity,
    get_status_service,
    get_submission_service,
    rate_limit,
)
from controller.document_staging import stage_documents
from model.api import MeResponse, MessageResponse, StatusResponse
from model.identity import Identity
from service.status_service import StatusService
from service.submission_service import SubmissionService
from util.constants import InternalURIs

submission_router = APIRouter(dependencies=[Depends(rate_limit)])


@submission_router.post(
    InternalURIs.UPLOAD,
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
async def upload_documents(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    service: SubmissionService = Depends(get_submission_service),
) -> MessageResponse:
    files = await stage_documents(request)
    await service.submit(identity.folder_key, files)
    return MessageResponse(message="Documents uploaded successfully.")


@submission_router.get(InternalURIs.STATUS, response_model=StatusResponse)
async def submission_status(
    identity: Identity = Depends(get_current_identity),
    service: StatusService = Depends(get_status_service),
) -> StatusResponse:
    result = await service.status(identity.folder_key)
    return StatusResponse(
        status="found" if result.found else "not-found",
        uploadedFiles=result.files,
    )


@submission_router.get(InternalURIs.ME, response_model=MeResponse)
async def whoami(identity: Identity = Depends(get_current_identity)) -> MeResponse:
    return MeResponse(
        message=f"Hello, {identity.given_name} {identity.family_name}!",
        email=identity.email,
        username=identity.preferred_username,
    )
