"""Builders for match notification payloads and email template context."""

from typing import Any, Dict

from lostfound.domain.models import Item, ItemType, NotificationCreate, NotificationType
from lostfound.matching.models import MatchCandidate


def build_notification_data(
    other_item: Item, other_type: ItemType, match: MatchCandidate
) -> Dict[str, Any]:
    """Structured payload referencing the other item of a matched pair."""
    return {
        "item_id": other_item.id,
        "item_type": ItemType(other_type).value,
        "match_score": match.score,
        "factors": match.factor_breakdown(),
    }


def build_match_notification(
    recipient_id: str,
    other_item: Item,
    other_type: ItemType,
    match: MatchCandidate,
    is_new_item_owner: bool,
) -> NotificationCreate:
    """Build the notification telling recipient_id about other_item.

    Args:
        recipient_id: User being notified
        other_item: The item on the other side of the match
        other_type: Type of other_item
        match: Scored match (score and factors are shared by both parties)
        is_new_item_owner: True when the recipient just posted the new item

    Returns:
        NotificationCreate ready for the notification store
    """
    other_type = ItemType(other_type)
    summary = (
        f"'{other_item.display_title}' ({other_type.value}) at "
        f"{other_item.display_location}, {match.score}% match"
    )

    if is_new_item_owner:
        title = "Potential Match Found!"
        message = f"We found a {other_type.value} item that may match your post: {summary}."
    else:
        title = "New Match for your Item!"
        message = f"A new {other_type.value} item was just posted that may match yours: {summary}."

    reasons = match.reasons()
    if reasons:
        message = f"{message} Why: {'; '.join(reasons)}."

    return NotificationCreate(
        user_id=recipient_id,
        title=title,
        message=message,
        type=NotificationType.MATCH,
        data=build_notification_data(other_item, other_type, match),
    )


def build_email_context(
    item_type: ItemType, item_title: str, match_percentage: int, app_name: str
) -> Dict[str, Any]:
    """Template context for a match email.

    Args:
        item_type: Type of the recipient's own item
        item_title: Title of the matched item
        match_percentage: Match score, 0-100
        app_name: Product name shown in the email
    """
    item_type = ItemType(item_type)
    return {
        "app_name": app_name,
        "item_title": item_title,
        "item_type": item_type.value,
        "matched_item_label": item_type.opposite.label,
        "match_percentage": int(match_percentage),
    }
