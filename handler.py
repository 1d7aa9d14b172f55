# handler.py - webhook Lambda (Bot Framework activity in, reply out, always ack 200)
import os
import json
import logging

from app_context import build_context
from botframework import InboundMessage, build_reply, send_reply
from retry_dispatch import should_retry
from router import route

LOG = logging.getLogger()
LOG.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

_context = None


def get_context():
    global _context
    if _context is None:
        _context = build_context()
    return _context


def acknowledge(event):
    return {
        "statusCode": 200,
        "body": json.dumps({"message": "ok", "input": event}, default=str),
    }


def parse_activity(event):
    body = event.get("body")
    if isinstance(body, (str, bytes)):
        return json.loads(body)
    return body


def process_event(event, ctx):
    """Authenticate, route, reply and schedule at most one retry.

    Returns the reply response, or None when nothing was sent.
    """
    expired = bool(event.get("expired"))
    message = InboundMessage.from_activity(parse_activity(event))

    token = ctx.authenticator.authenticate(force_refresh=expired)
    text = route(message, ctx.sensors, ctx.settings)
    payload = build_reply(message, text)
    result = send_reply(message.service_url, token, payload, timeout=ctx.settings.http_timeout)

    if result is None:
        LOG.info("Nothing to reply to message %s", message.id)
        return None

    if should_retry(result.status, expired):
        LOG.warning("Reply to %s failed with HTTP %s; scheduling retry with fresh token",
                    message.id, result.status)
        try:
            ctx.dispatcher.dispatch(event)
        except Exception:
            LOG.exception("Failed to schedule retry; continuing to acknowledge")
    elif result.status != 200:
        LOG.error("Retried reply to %s failed with HTTP %s; giving up", message.id, result.status)
    return result


def lambda_handler(event, context):
    LOG.info("Incoming event (webhook): %s", json.dumps(event, default=str)[:2000])

    if not event.get("body"):
        return acknowledge(event)

    try:
        process_event(event, get_context())
    except Exception:
        LOG.exception("Failed to handle activity; acknowledging anyway")

    return acknowledge(event)
