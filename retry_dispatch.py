# retry_dispatch.py - schedules the single forced-refresh retry of a failed reply
import json
import logging
from datetime import datetime, timezone

from bot_config import RETRY_LAMBDA, RETRY_OFF, RETRY_SQS

LOG = logging.getLogger(__name__)


def should_retry(status, expired) -> bool:
    """Retry only a reply that was actually sent, failed, and is not itself a retry."""
    if status is None:
        return False
    return status != 200 and not expired


def build_envelope(event: dict) -> dict:
    return dict(event, expired=True)


class RetryDispatcher:
    """Fire-and-forget hand-off of a retry envelope.

    ``sqs`` enqueues the envelope for worker.py, ``lambda`` invokes this
    function again asynchronously, ``off`` only logs.
    """

    def __init__(self, mode=RETRY_SQS, sqs=None, queue_url=None,
                 lambda_client=None, function_name=None, delay_seconds=0):
        self.mode = mode
        self.sqs = sqs
        self.queue_url = queue_url
        self.lambda_client = lambda_client
        self.function_name = function_name
        self.delay_seconds = delay_seconds

    def dispatch(self, event: dict) -> bool:
        envelope = build_envelope(event)
        body = json.dumps(envelope)

        if self.mode == RETRY_SQS:
            if not self.queue_url:
                raise ValueError("RETRY_QUEUE_URL is not configured")
            resp = self.sqs.send_message(
                QueueUrl=self.queue_url,
                MessageBody=body,
                DelaySeconds=self.delay_seconds,
                MessageAttributes={
                    "received_at": {
                        "DataType": "String",
                        "StringValue": datetime.now(timezone.utc).isoformat(),
                    }
                },
            )
            LOG.info("Enqueued retry to SQS id=%s", resp.get("MessageId"))
            return True

        if self.mode == RETRY_LAMBDA:
            if not self.function_name:
                raise ValueError("AWS_LAMBDA_FUNCTION_NAME is not set")
            resp = self.lambda_client.invoke(
                FunctionName=self.function_name,
                InvocationType="Event",
                Payload=body.encode("utf-8"),
            )
            LOG.info("Invoked %s for retry, status=%s", self.function_name, resp.get("StatusCode"))
            return True

        if self.mode == RETRY_OFF:
            LOG.info("Retry disabled; dropping failed reply")
            return False

        raise ValueError("Unknown retry mode %r" % self.mode)
