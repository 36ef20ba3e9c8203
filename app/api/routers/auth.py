# app/api/routers/auth.py
from fastapi import APIRouter, Depends

from app.api.deps import get_auth_service, get_caller, get_token
from app.domain.order_status import Caller
from app.domain.schemas import MessageOut, OtpSendIn, OtpSendOut, OtpVerifyIn, SessionOut
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/otp/send", response_model=OtpSendOut, response_model_exclude_none=True)
def send_otp(payload: OtpSendIn, svc: AuthService = Depends(get_auth_service)):
    return svc.send_otp(payload.phone)


@router.post("/otp/verify", response_model=SessionOut)
def verify_otp(payload: OtpVerifyIn, svc: AuthService = Depends(get_auth_service)):
    return svc.verify_otp(payload.phone, payload.code)


@router.post("/logout", response_model=MessageOut)
def logout(
    token: str = Depends(get_token),
    caller: Caller = Depends(get_caller),
    svc: AuthService = Depends(get_auth_service),
):
    #get_caller odrzuca nieznany token przed usunieciem sesji
    return svc.logout(caller, token)
