"""
Expo Push Notification Service
Delivers push notifications to the mobile apps through the Expo push API
"""

import logging
from typing import Optional

import httpx

from ..config import EXPO_ACCESS_TOKEN, EXPO_PUSH_URL, PUSH_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def is_expo_push_token(token: Optional[str]) -> bool:
    """Check the token looks like an Expo push token"""
    if not token:
        return False
    return token.startswith("ExponentPushToken[") or token.startswith("ExpoPushToken[")


async def send_push(
    token: str,
    title: str,
    body: str,
    data: Optional[dict] = None,
) -> tuple[bool, Optional[str]]:
    """
    Send a push notification via Expo

    Args:
        token: Expo push token of the recipient device
        title: Notification title
        body: Notification body text
        data: Optional payload delivered to the app

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not is_expo_push_token(token):
        logger.warning(f"⚠️ Invalid Expo push token: {token}")
        return False, "Invalid push token"

    message = {"to": token, "title": title, "body": body, "sound": "default"}
    if data:
        message["data"] = data

    headers = {"Accept": "application/json", "Content-Type": "application/json"}
    if EXPO_ACCESS_TOKEN:
        headers["Authorization"] = f"Bearer {EXPO_ACCESS_TOKEN}"

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                EXPO_PUSH_URL,
                json=message,
                headers=headers,
                timeout=PUSH_TIMEOUT_SECONDS,
            )

        logger.info(f"📡 Expo push API response status: {response.status_code}")

        if response.status_code != 200:
            logger.error(f"❌ Expo push API error: HTTP {response.status_code}")
            return False, f"HTTP {response.status_code}"

        ticket = response.json().get("data") or {}
        if isinstance(ticket, list):
            ticket = ticket[0] if ticket else {}

        if ticket.get("status") == "error":
            error_message = ticket.get("message", "Unknown error")
            logger.error(f"❌ Expo rejected push to {token}: {error_message}")
            return False, error_message

        logger.info(f"✅ Push notification sent to {token}")
        return True, None

    except httpx.HTTPError as e:
        logger.error(f"Expo push API error: {str(e)}")
        return False, str(e)
    except Exception as e:
        logger.error(f"Error sending push notification: {str(e)}")
        return False, str(e)
