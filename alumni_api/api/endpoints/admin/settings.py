"""
Admin Settings endpoint - site settings served from configuration.
"""
from fastapi import APIRouter, Depends

from alumni_api.core.config import settings
from alumni_api.models.user import User
from alumni_api.modules.auth.dependencies import get_current_admin
from alumni_api.schemas.admin import (
    SettingsResponse,
    GeneralSettings,
    PaymentSettings,
    NotificationSettings,
    FeatureSettings,
)

router = APIRouter()


@router.get("", response_model=SettingsResponse)
async def get_settings(current_admin: User = Depends(get_current_admin)):
    return SettingsResponse(
        general=GeneralSettings(
            site_name=settings.SITE_NAME,
            site_description=settings.SITE_DESCRIPTION,
            contact_email=settings.CONTACT_EMAIL,
            support_phone=settings.SUPPORT_PHONE,
        ),
        payments=PaymentSettings(
            default_currency=settings.DEFAULT_CURRENCY,
            stripe_enabled=settings.STRIPE_ENABLED,
            mobile_money_enabled=settings.MOBILE_MONEY_ENABLED,
        ),
        notifications=NotificationSettings(
            email_enabled=bool(settings.SMTP_USER and settings.SMTP_PASSWORD),
            sms_enabled=bool(settings.SMS_GATEWAY_URL and settings.SMS_GATEWAY_API_KEY),
            push_enabled=settings.PUSH_NOTIFICATIONS_ENABLED,
        ),
        features=FeatureSettings(
            job_board=settings.JOB_BOARD_ENABLED,
            events=settings.EVENTS_ENABLED,
            announcements=settings.ANNOUNCEMENTS_ENABLED,
            messaging=settings.MESSAGING_ENABLED,
        ),
    )
