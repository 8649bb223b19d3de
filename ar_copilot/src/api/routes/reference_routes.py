from typing import List

from fastapi import APIRouter, Depends, HTTPException
import structlog

from ..models.reference_models import (
    CommentRequest,
    CommentResponse,
    DenialCodeMapping,
    OptionItem,
    SessionResponse,
)
from ..dependencies import get_account_service
from ...processing.account_service import AccountService
from ...processing.denial_codes import (
    ELIGIBILITY_STATUS_OPTIONS,
    INSURANCE_OPTIONS,
    get_denial_code_mapping,
    list_denial_codes,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/denial-codes", response_model=List[DenialCodeMapping])
async def get_denial_codes():
    return list_denial_codes()


@router.get("/denial-codes/{code}", response_model=DenialCodeMapping)
async def get_denial_code(code: str):
    mapping = get_denial_code_mapping(code)
    if mapping is None:
        logger.info("Unknown denial code requested", denial_code=code)
        raise HTTPException(status_code=404, detail="Denial code not found")
    return mapping


@router.get("/options/insurance", response_model=List[OptionItem])
async def get_insurance_options():
    return INSURANCE_OPTIONS


@router.get("/options/eligibility", response_model=List[OptionItem])
async def get_eligibility_status_options():
    return ELIGIBILITY_STATUS_OPTIONS


@router.post("/comments", response_model=CommentResponse)
async def generate_comment(
    form_data: CommentRequest,
    service: AccountService = Depends(get_account_service),
):
    """Builds the RCM comment from unsaved form values."""
    try:
        comment = service.generate_comment_for(form_data)
    except Exception as e:
        logger.error("Error generating RCM comment", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate comment")
    return CommentResponse(comment=comment)


@router.post("/sessions", status_code=201, response_model=SessionResponse)
async def start_session(service: AccountService = Depends(get_account_service)):
    session_id = service.new_session_id()
    logger.info("Call session started", session_id=session_id)
    return SessionResponse(session_id=session_id)
