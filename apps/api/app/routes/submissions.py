"""Submission routes."""

from enum import Enum
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from app.routes.dependencies import get_authenticated_principal, get_submission_service
from app.schemas.auth import AuthPrincipal
from app.schemas.error import ErrorResponse
from app.schemas.submission import (
    CreateSubmissionRequest,
    SaveSignatureRequest,
    SignatureKind,
    SignatureUploadUrl,
    SignatureViewUrl,
    Submission,
)
from app.services.submissions import SubmissionService

router = APIRouter(prefix="/submissions", tags=["Submissions"])


class SignatureSlot(str, Enum):
    """URL segment naming one of the three signature attachments."""

    SIGNATURE = "signature"
    SUPERVISOR_SIGNATURE = "supervisor-signature"
    PRE_APPROVED_SIGNATURE = "pre-approved-signature"


_SLOT_KINDS: dict[SignatureSlot, SignatureKind] = {
    SignatureSlot.SIGNATURE: SignatureKind.STUDENT,
    SignatureSlot.SUPERVISOR_SIGNATURE: SignatureKind.SUPERVISOR,
    SignatureSlot.PRE_APPROVED_SIGNATURE: SignatureKind.PRE_APPROVED,
}

_OWNERSHIP_RESPONSES: dict[int | str, dict] = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get(
    "",
    response_model=list[Submission],
    responses={401: {"model": ErrorResponse}},
)
def list_submissions(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> list[Submission]:
    return service.list_submissions(owner_id=principal.user_id)


@router.post(
    "",
    response_model=Submission,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}},
)
def create_submission(
    payload: CreateSubmissionRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> Submission:
    return service.create_submission(owner_id=principal.user_id, payload=payload)


@router.get(
    "/{submissionId}/{slot}-upload-url",
    response_model=SignatureUploadUrl,
    responses=_OWNERSHIP_RESPONSES,
)
def get_signature_upload_url(
    submission_id: Annotated[str, Path(alias="submissionId")],
    slot: SignatureSlot,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> SignatureUploadUrl:
    return service.get_upload_url(owner_id=principal.user_id, submission_id=submission_id, kind=_SLOT_KINDS[slot])


@router.patch(
    "/{submissionId}/{slot}",
    response_model=Submission,
    responses={**_OWNERSHIP_RESPONSES, 422: {"model": ErrorResponse}},
)
def save_signature(
    submission_id: Annotated[str, Path(alias="submissionId")],
    slot: SignatureSlot,
    payload: SaveSignatureRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> Submission:
    return service.save_signature_key(
        owner_id=principal.user_id,
        submission_id=submission_id,
        key=payload.signature_key,
        kind=_SLOT_KINDS[slot],
    )


@router.get(
    "/{submissionId}/{slot}",
    response_model=SignatureViewUrl,
    responses=_OWNERSHIP_RESPONSES,
)
def get_signature_view_url(
    submission_id: Annotated[str, Path(alias="submissionId")],
    slot: SignatureSlot,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> SignatureViewUrl:
    return service.get_view_url(owner_id=principal.user_id, submission_id=submission_id, kind=_SLOT_KINDS[slot])
