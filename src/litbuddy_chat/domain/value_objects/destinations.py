"""Broker destination names shared with the backend."""
from __future__ import annotations


def chat_messages(chat_id: str) -> str:
    return f"/topic/chat/{chat_id}/messages"


def chat_status(chat_id: str) -> str:
    return f"/topic/chat/{chat_id}/status"


def user_messages(user_id: str) -> str:
    return f"/user/{user_id}/queue/messages"


def user_conversation_status(user_id: str) -> str:
    return f"/user/{user_id}/queue/conversation-status"


def group_chat_messages(chat_id: str) -> str:
    return f"/topic/group-chat/{chat_id}/messages"


def user_group_messages(user_id: str) -> str:
    return f"/user/{user_id}/queue/group-messages"


def user_notifications(user_id: str) -> str:
    return f"/topic/user.{user_id}.notifications"
