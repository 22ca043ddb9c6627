from fastapi import APIRouter

from app.schemas import SmsResponse, SmsSendRequest, SmsStatusResponse
from app.services.sms import get_sms_status, send_sms

router = APIRouter(prefix="/api/sms", tags=["sms"])


@router.post("", response_model=SmsResponse, response_model_exclude_none=True)
async def post_sms(payload: SmsSendRequest) -> SmsResponse:
    data = await send_sms(payload.to, payload.message)
    return SmsResponse(success=True, data=data, message="SMS sent successfully")


@router.get("", response_model=SmsStatusResponse, response_model_exclude_none=True)
async def get_sms() -> SmsStatusResponse:
    return SmsStatusResponse(
        success=True,
        data=get_sms_status(),
        message="SMS service is configured and ready",
    )
