"""
Unified Notification Service
Sends email and push for the same event, each channel independently.
A failing channel is recorded in the result and never raised.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


async def send_notification(
    recipient_email: Optional[str],
    push_token: Optional[str],
    recipient_name: str,
    notification_type: str,
    email_func,
    push_func,
    email_kwargs: dict,
    push_kwargs: dict,
) -> dict:
    """
    Unified notification sender that handles both email and push

    Args:
        recipient_email: Recipient email address
        push_token: Recipient Expo push token, if on file
        recipient_name: Recipient name for logging
        notification_type: Type of notification (for logging)
        email_func: Email coroutine to call
        push_func: Push coroutine to call, returns (success, error)
        email_kwargs: Kwargs for email function
        push_kwargs: Kwargs for push function

    Returns:
        Dict with email_sent and push_sent status
    """
    result = {"email_sent": False, "push_sent": False, "email_error": None, "push_error": None}

    if recipient_email:
        try:
            logger.info(f"📧 Sending {notification_type} email to {recipient_email}")
            await email_func(**email_kwargs)
            result["email_sent"] = True
            logger.info(f"✅ {notification_type} email sent successfully to {recipient_email}")
        except Exception as e:
            result["email_error"] = str(e)
            logger.error(f"❌ Failed to send {notification_type} email to {recipient_email}: {e}")
    else:
        logger.debug(f"⚠️ No email address for {notification_type} notification to {recipient_name}")

    if push_token:
        try:
            logger.info(f"📱 Sending {notification_type} push to {recipient_name}")
            success, error = await push_func(token=push_token, **push_kwargs)
            if success:
                result["push_sent"] = True
            else:
                result["push_error"] = error
                logger.warning(f"⚠️ {notification_type} push not sent to {recipient_name}: {error}")
        except Exception as e:
            result["push_error"] = str(e)
            logger.error(f"❌ Failed to send {notification_type} push to {recipient_name}: {e}")
    else:
        logger.debug(f"ℹ️ No push token on file for {recipient_name}")

    return result


async def send_preferred_cleaner_notification(
    cleaner_email: Optional[str],
    cleaner_push_token: Optional[str],
    cleaner_first_name: str,
    homeowner_name: str,
    home_label: str,
    home_id: Optional[int] = None,
) -> dict:
    """Tell a cleaner they earned preferred status, by email and push"""
    from ..email_service import send_preferred_cleaner_email
    from .push_service import send_push

    return await send_notification(
        recipient_email=cleaner_email,
        push_token=cleaner_push_token,
        recipient_name=cleaner_first_name,
        notification_type="preferred_cleaner",
        email_func=send_preferred_cleaner_email,
        push_func=send_push,
        email_kwargs={
            "to": cleaner_email,
            "cleaner_first_name": cleaner_first_name,
            "homeowner_name": homeowner_name,
            "home_label": home_label,
        },
        push_kwargs={
            "title": "You earned preferred status!",
            "body": f"{homeowner_name} has made you a preferred cleaner!",
            "data": {"type": "preferred_cleaner", "homeId": home_id},
        },
    )
