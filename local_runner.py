# local_runner.py
# Invokes the webhook and retry worker locally against mock_botframework.py
# (and LocalStack for DynamoDB/SQS when AWS_ENDPOINT is reachable).
import os
import json
import uuid

# Config: override env vars for local test
os.environ.setdefault("SECRETS_ENCRYPTED", "false")
os.environ.setdefault("MS_BOT_CLIENT_ID", "local-client")
os.environ.setdefault("MS_BOT_CLIENT_SECRET", "local-secret")
os.environ.setdefault("TOKEN_ENDPOINT", "http://localhost:8080/botframework.com/oauth2/v2.0/token")
os.environ.setdefault("SENSORS_API", "http://localhost:8080/sensors")
# For LocalStack endpoints:
os.environ.setdefault("AWS_ENDPOINT", "http://localhost:4566")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
# Set the table and queue you created with Terraform:
os.environ.setdefault("TOKEN_TABLE_NAME", "bot-token-cache")
os.environ.setdefault("RETRY_QUEUE_URL", "http://localhost:4566/000000000000/bot-reply-retries")

import handler  # noqa: E402  (reads the environment above)
import worker  # noqa: E402


def sample_event(text, expired=False):
    activity = {
        "type": "message",
        "id": uuid.uuid4().hex,
        "text": text,
        "channelId": "emulator",
        "serviceUrl": "http://localhost:8080",
        "from": {"id": "user-1", "name": "Test"},
        "recipient": {"id": "bot-1", "name": "sensorbot"},
        "conversation": {"id": "conv-1", "isGroup": False},
    }
    event = {"httpMethod": "POST", "path": "/messages", "body": json.dumps(activity)}
    if expired:
        event["expired"] = True
    return event


if __name__ == "__main__":
    for text in ("/sensors", "/current", "hello"):
        print("Invoking handler.lambda_handler with %r..." % text)
        print(handler.lambda_handler(sample_event(text), None)["statusCode"])

    # An empty cache makes the first reply fail with 401; replay what the retry queue would carry.
    envelope = sample_event("/current", expired=True)
    print("Invoking worker.lambda_handler with a retry envelope...")
    worker.lambda_handler({"Records": [{"body": json.dumps(envelope)}]}, None)
    print("Done. Check http://localhost:8080/_state for the replies received.")
