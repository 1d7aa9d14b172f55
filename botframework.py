# botframework.py - inbound activity parsing and replies via the Bot Connector REST API
import json
import logging
import urllib.parse
from dataclasses import dataclass
from typing import Optional

import http_client

LOG = logging.getLogger(__name__)

INLINE_QUERY_CHANNEL = "telegram"


class MalformedActivityError(ValueError):
    pass


@dataclass(frozen=True)
class ChannelAccount:
    id: str
    name: Optional[str] = None

    @classmethod
    def from_json(cls, data, field_name):
        if not isinstance(data, dict) or not data.get("id"):
            raise MalformedActivityError("Activity has no %s.id" % field_name)
        return cls(id=data["id"], name=data.get("name"))

    def to_json(self):
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class InboundMessage:
    id: str
    sender: ChannelAccount
    recipient: ChannelAccount
    conversation_id: str
    service_url: str
    is_group: Optional[bool] = None
    text: Optional[str] = None
    channel_id: Optional[str] = None
    inline_query: Optional[str] = None

    @classmethod
    def from_activity(cls, activity) -> "InboundMessage":
        if not isinstance(activity, dict):
            raise MalformedActivityError("Activity is not a JSON object")
        for key in ("id", "serviceUrl"):
            if not activity.get(key):
                raise MalformedActivityError("Activity has no %s" % key)
        conversation = activity.get("conversation")
        if not isinstance(conversation, dict) or not conversation.get("id"):
            raise MalformedActivityError("Activity has no conversation.id")

        channel_data = activity.get("channelData") or {}
        inline = channel_data.get("inline_query") if isinstance(channel_data, dict) else None
        query = inline.get("query") if isinstance(inline, dict) else None

        return cls(
            id=activity["id"],
            sender=ChannelAccount.from_json(activity.get("from"), "from"),
            recipient=ChannelAccount.from_json(activity.get("recipient"), "recipient"),
            conversation_id=conversation["id"],
            is_group=conversation.get("isGroup"),
            service_url=activity["serviceUrl"],
            text=activity.get("text"),
            channel_id=activity.get("channelId"),
            inline_query=query,
        )


def build_reply(message: InboundMessage, text: Optional[str]) -> dict:
    """Reply activity addressed back to the sender of ``message``."""
    return {
        "type": "message",
        "from": message.recipient.to_json(),
        "conversation": {
            "isGroup": message.is_group,
            "id": message.conversation_id,
        },
        "recipient": message.sender.to_json(),
        "text": text or "",
        "replyToId": message.id,
    }


def reply_url(service_url: str, conversation_id: str, reply_to_id: str) -> str:
    return "%s/v3/conversations/%s/activities/%s" % (
        service_url.rstrip("/"),
        urllib.parse.quote(conversation_id, safe=""),
        urllib.parse.quote(reply_to_id, safe=""),
    )


def send_reply(service_url: str, token: str, payload: dict, timeout: float = 10,
               http=None) -> Optional[http_client.HttpResponse]:
    """POST the reply; returns None without a network call when there is no text.

    Any HTTP status comes back in the response, the caller decides what a
    failure is.
    """
    if not payload.get("text"):
        return None

    http = http or http_client.request
    url = reply_url(service_url, payload["conversation"]["id"], payload["replyToId"])
    body = json.dumps(payload).encode("utf-8")
    resp = http(
        url,
        method="POST",
        data=body,
        headers={
            "Authorization": "Bearer %s" % token,
            "Content-Type": "application/json",
        },
        timeout=timeout,
    )
    LOG.info("Reply to %s returned HTTP %s", payload["replyToId"], resp.status)
    return resp
