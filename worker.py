# worker.py - SQS consumer Lambda
# Consumes retry envelopes queued by handler.py and replays them once with a
# freshly issued token. An envelope is never re-queued from here.
import os
import json
import logging

import handler

LOG = logging.getLogger()
LOG.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())


def process_retry(envelope: dict, ctx=None):
    if not isinstance(envelope, dict):
        LOG.info("Retry envelope is not an object; skipping.")
        return None
    envelope = dict(envelope, expired=True)
    return handler.process_event(envelope, ctx or handler.get_context())


def lambda_handler(event, context):
    LOG.info("Worker received event: %s", json.dumps(event, default=str)[:2000])
    records = event.get("Records", [])
    for rec in records:
        body = rec.get("body")
        if not body:
            continue
        try:
            envelope = json.loads(body)
        except ValueError:
            LOG.exception("Invalid JSON in SQS record body - skipping.")
            continue
        received_at = ((rec.get("messageAttributes") or {}).get("received_at") or {}).get("stringValue")
        LOG.info("Replaying retry %s queued at %s", rec.get("messageId"), received_at)
        try:
            process_retry(envelope)
        except Exception as e:
            LOG.exception("Error processing retry: %s", e)
