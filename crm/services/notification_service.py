import logging
from typing import Optional, Tuple

from .supabase_client import BACKEND_ERRORS, error_message, require_client

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


def _preview(note: str) -> str:
    if len(note) > PREVIEW_LENGTH:
        return note[:PREVIEW_LENGTH] + "..."
    return note


def create_activity_follow_up_notification(
    activity_id: str, follow_up_note: str, created_by: str
) -> Tuple[bool, str]:
    """Tell the owner of an activity that someone added a follow-up to it."""

    client = require_client()
    try:
        rows = (
            client.table("activities")
            .select("id, salesperson_id, salesperson_name, activity_type, customer_name, lead_name")
            .eq("id", activity_id)
            .limit(1)
            .execute()
            .data
        )
    except BACKEND_ERRORS as exc:
        logger.exception("Error fetching activity %s", activity_id)
        return False, error_message(exc)

    activity = rows[0] if rows else None
    if not activity or not activity.get("salesperson_id"):
        return False, "Activity not found or no salesperson assigned"
    if activity["salesperson_id"] == created_by:
        logger.debug("Follow-up by activity owner %s; no notification", created_by)
        return True, "Notification skipped - same user"

    creator_name = "Someone"
    try:
        profiles = client.table("profiles").select("full_name").eq("id", created_by).limit(1).execute().data
    except BACKEND_ERRORS:
        logger.warning("Could not load profile of %s", created_by, exc_info=True)
        profiles = []
    if profiles and profiles[0].get("full_name"):
        creator_name = profiles[0]["full_name"]

    entity = activity.get("customer_name") or activity.get("lead_name") or "Unknown"
    message = (
        f"{creator_name} added a follow-up to your {activity.get('activity_type')} "
        f'activity with {entity}: "{_preview(follow_up_note or "")}"'
    )
    try:
        client.table("notifications").insert(
            {
                "recipient_id": activity["salesperson_id"],
                "sender_id": created_by,
                "title": "New Follow-up Added to Your Activity",
                "message": message,
                "type": "activity_follow_up",
                "reference_id": activity_id,
            }
        ).execute()
    except BACKEND_ERRORS as exc:
        logger.exception("Error creating follow-up notification")
        return False, error_message(exc)
    return True, "Follow-up notification created successfully"


def create_admin_notification(
    notification_type: str,
    entity_id: str,
    title: str,
    message: str,
    sender_id: Optional[str] = None,
) -> Tuple[bool, str]:
    """Insert one notification per admin profile."""

    client = require_client()
    try:
        admins = client.table("profiles").select("id").eq("role", "admin").execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Error fetching admin users")
        return False, error_message(exc)
    if not admins:
        logger.warning("No admin users found for %s notification", notification_type)
        return False, "No admin users found"

    rows = [
        {
            "recipient_id": admin["id"],
            "sender_id": sender_id,
            "title": title,
            "message": message,
            "type": notification_type,
            "reference_id": entity_id,
        }
        for admin in admins
    ]
    try:
        created = client.table("notifications").insert(rows).execute().data
    except BACKEND_ERRORS as exc:
        logger.exception("Error creating admin notifications")
        return False, error_message(exc)
    return True, f"Created {len(created or [])} admin notifications"
