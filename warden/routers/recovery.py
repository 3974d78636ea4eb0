"""Password recovery API endpoints."""

from fastapi import APIRouter, Depends

from warden.dependencies import Services, get_services
from warden.schemas.auth import ExchangeCodeRequest, RecoveryRequest, ResetPasswordRequest, ResettingCodeResponse

router = APIRouter(prefix="/api/v1/password", tags=["Password Recovery"])


@router.post("/recovery")
def send_recovery_email(body: RecoveryRequest, services: Services = Depends(get_services)) -> dict:
    """Email a recovery code to the user's address."""
    services.recovery.send_recovery_email(body.username)
    return {"detail": "Recovery code sent"}


@router.post("/recovery/exchange", response_model=ResettingCodeResponse)
def exchange_recovery_code(
    body: ExchangeCodeRequest, services: Services = Depends(get_services)
) -> ResettingCodeResponse:
    """Exchange the emailed recovery code for a resetting code."""
    return ResettingCodeResponse(resetting_code=services.recovery.exchange_recovery_code(body.username, body.code))


@router.post("/reset")
def reset_password(body: ResetPasswordRequest, services: Services = Depends(get_services)) -> dict:
    """Set a new password using the resetting code."""
    services.recovery.reset_password(body.username, body.code, body.new_password)
    return {"detail": "Password updated"}
