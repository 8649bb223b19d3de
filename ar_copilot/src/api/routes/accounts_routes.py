from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request, Response
import structlog

from ..models.account_models import (
    DenialCodeSelection,
    NewAccountRequest,
    PatientAccount,
    PatientAccountCreate,
    PatientAccountUpdate,
)
from ..models.reference_models import CommentResponse
from ..dependencies import get_account_service, get_audit_logger
from ...core.monitoring.audit_logger import AuditLogger
from ...processing.account_service import AccountNotFoundError, AccountService

logger = structlog.get_logger(__name__)
router = APIRouter()

ACCOUNT_NOT_FOUND = "Patient account not found"


def _client_info(request: Request) -> Tuple[Optional[str], Optional[str]]:
    client_ip = request.client.host if request.client else None
    return client_ip, request.headers.get("user-agent")


# Static prefixes (detail/, sessions/) are registered before the /{session_id} catch-alls.
# Detail ids use the int convertor so a session named "detail" still reaches its routes.

@router.get("/detail/{account_id:int}", response_model=PatientAccount)
async def get_account(
    account_id: int,
    request: Request,
    service: AccountService = Depends(get_account_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    client_ip, user_agent = _client_info(request)
    try:
        account = service.get_account(account_id)
    except AccountNotFoundError:
        raise HTTPException(status_code=404, detail=ACCOUNT_NOT_FOUND)
    except Exception as e:
        logger.error("Error fetching patient account", account_id=account_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch patient account")

    await audit_logger.log_access(
        user_id=None, action="VIEW_ACCOUNT", resource="PatientAccount", resource_id=str(account.id),
        account_number=account.account_number, session_id=account.session_id,
        ip_address=client_ip, user_agent=user_agent, success=True
    )
    return account


@router.get("/detail/{account_id:int}/comment", response_model=CommentResponse)
async def get_account_comment(
    account_id: int,
    service: AccountService = Depends(get_account_service),
):
    try:
        comment = service.generate_comment(account_id)
    except AccountNotFoundError:
        raise HTTPException(status_code=404, detail=ACCOUNT_NOT_FOUND)
    except Exception as e:
        logger.error("Error generating comment for patient account", account_id=account_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate comment")
    return CommentResponse(comment=comment)


@router.post("/sessions/{session_id}/new", status_code=201, response_model=PatientAccount)
async def open_new_account(
    session_id: str,
    request: Request,
    new_account: Optional[NewAccountRequest] = None,
    service: AccountService = Depends(get_account_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    client_ip, user_agent = _client_info(request)
    from_account_id = new_account.from_account_id if new_account else None
    try:
        account = service.open_new_account(session_id, from_account_id=from_account_id)
    except AccountNotFoundError:
        raise HTTPException(status_code=404, detail=ACCOUNT_NOT_FOUND)
    except Exception as e:
        logger.error("Error opening new patient account", session_id=session_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create patient account")

    await audit_logger.log_access(
        user_id=None, action="OPEN_ACCOUNT", resource="PatientAccount", resource_id=str(account.id),
        account_number=account.account_number, session_id=session_id,
        ip_address=client_ip, user_agent=user_agent, success=True,
        details={"from_account_id": from_account_id}
    )
    return account


@router.post("", status_code=201, response_model=PatientAccount)
async def create_account(
    account_data: PatientAccountCreate,
    request: Request,
    service: AccountService = Depends(get_account_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    logger.info("Received request to create patient account", session_id=account_data.session_id)
    client_ip, user_agent = _client_info(request)
    try:
        account = service.create_account(account_data)
    except Exception as e:
        logger.error("Error creating patient account (unexpected)", error=str(e), exc_info=True)
        await audit_logger.log_access(
            user_id=None, action="CREATE_ACCOUNT_ERROR", resource="PatientAccount",
            account_number=account_data.account_number, session_id=account_data.session_id,
            ip_address=client_ip, user_agent=user_agent, success=False,
            failure_reason=f"Unexpected error: {str(e)}"
        )
        raise HTTPException(status_code=500, detail="Failed to create patient account")

    await audit_logger.log_access(
        user_id=None, action="CREATE_ACCOUNT_SUCCESS", resource="PatientAccount", resource_id=str(account.id),
        account_number=account.account_number, session_id=account.session_id,
        ip_address=client_ip, user_agent=user_agent, success=True
    )
    return account


@router.patch("/{account_id}", response_model=PatientAccount)
async def update_account(
    account_id: int,
    updates: PatientAccountUpdate,
    request: Request,
    service: AccountService = Depends(get_account_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    client_ip, user_agent = _client_info(request)
    try:
        account = service.update_account(account_id, updates)
    except AccountNotFoundError:
        await audit_logger.log_access(
            user_id=None, action="UPDATE_ACCOUNT_NOT_FOUND", resource="PatientAccount", resource_id=str(account_id),
            ip_address=client_ip, user_agent=user_agent, success=False, failure_reason=ACCOUNT_NOT_FOUND
        )
        raise HTTPException(status_code=404, detail=ACCOUNT_NOT_FOUND)
    except Exception as e:
        logger.error("Error updating patient account (unexpected)", account_id=account_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update patient account")

    await audit_logger.log_access(
        user_id=None, action="UPDATE_ACCOUNT_SUCCESS", resource="PatientAccount", resource_id=str(account.id),
        account_number=account.account_number, session_id=account.session_id,
        ip_address=client_ip, user_agent=user_agent, success=True,
        details={"fields": sorted(updates.model_fields_set)}
    )
    return account


@router.delete("/{account_id}", status_code=204)
async def delete_account(
    account_id: int,
    request: Request,
    service: AccountService = Depends(get_account_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    client_ip, user_agent = _client_info(request)
    try:
        service.delete_account(account_id)
    except AccountNotFoundError:
        raise HTTPException(status_code=404, detail=ACCOUNT_NOT_FOUND)
    except Exception as e:
        logger.error("Error deleting patient account (unexpected)", account_id=account_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete patient account")

    await audit_logger.log_access(
        user_id=None, action="DELETE_ACCOUNT_SUCCESS", resource="PatientAccount", resource_id=str(account_id),
        ip_address=client_ip, user_agent=user_agent, success=True
    )
    return Response(status_code=204)


@router.post("/{account_id}/denial-code", response_model=PatientAccount)
async def select_denial_code(
    account_id: int,
    selection: DenialCodeSelection,
    service: AccountService = Depends(get_account_service),
):
    try:
        return service.select_denial_code(account_id, selection.denial_code)
    except AccountNotFoundError:
        raise HTTPException(status_code=404, detail=ACCOUNT_NOT_FOUND)
    except Exception as e:
        logger.error("Error selecting denial code", account_id=account_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update patient account")


@router.post("/{account_id}/copy-from/{source_id}", response_model=PatientAccount)
async def copy_call_details(
    account_id: int,
    source_id: int,
    service: AccountService = Depends(get_account_service),
):
    try:
        return service.copy_call_details(account_id, source_id)
    except AccountNotFoundError:
        raise HTTPException(status_code=404, detail=ACCOUNT_NOT_FOUND)
    except Exception as e:
        logger.error("Error copying call details", account_id=account_id, source_id=source_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update patient account")


@router.get("/{session_id}/export")
async def export_session(
    session_id: str,
    request: Request,
    service: AccountService = Depends(get_account_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    client_ip, user_agent = _client_info(request)
    try:
        filename, content = service.export_session(session_id)
    except Exception as e:
        logger.error("Error exporting session", session_id=session_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to export session")

    await audit_logger.log_access(
        user_id=None, action="EXPORT_SESSION", resource="Session", resource_id=session_id,
        session_id=session_id, ip_address=client_ip, user_agent=user_agent, success=True
    )
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{session_id}", response_model=List[PatientAccount])
async def list_session_accounts(
    session_id: str,
    service: AccountService = Depends(get_account_service),
):
    try:
        return service.list_session_accounts(session_id)
    except Exception as e:
        logger.error("Error fetching patient accounts", session_id=session_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch patient accounts")
