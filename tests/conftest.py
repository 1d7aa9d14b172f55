"""Shared fixtures: settings, an in-memory token table and a scripted HTTP callable."""

import json

import pytest

from bot_config import Settings
from http_client import HttpResponse


class FakeTable:
    """Enough of a boto3 DynamoDB Table for TokenCache."""

    def __init__(self):
        self.items = {}
        self.get_calls = 0
        self.put_calls = 0

    def get_item(self, Key):
        self.get_calls += 1
        item = self.items.get(Key["id"])
        return {"Item": dict(item)} if item else {}

    def put_item(self, Item):
        self.put_calls += 1
        self.items[Item["id"]] = dict(Item)
        return {}


class FakeHttp:
    """Records requests and answers from a list of (url-substring, response) rules."""

    def __init__(self):
        self.calls = []
        self.routes = []

    def add(self, fragment, status=200, body=None, raises=None, once=False):
        if body is not None and not isinstance(body, bytes):
            body = json.dumps(body).encode("utf-8")
        self.routes.append((fragment, status, body or b"", raises, once))

    def __call__(self, url, method="GET", data=None, headers=None, timeout=10):
        self.calls.append({"url": url, "method": method, "data": data,
                           "headers": headers or {}, "timeout": timeout})
        for route in self.routes:
            fragment, status, body, raises, once = route
            if fragment in url:
                if once:
                    self.routes.remove(route)
                if raises is not None:
                    raise raises
                return HttpResponse(status, body)
        raise AssertionError("Unexpected request to %s" % url)

    def calls_to(self, fragment):
        return [c for c in self.calls if fragment in c["url"]]


@pytest.fixture
def settings():
    return Settings(
        client_id="client-id",
        client_secret="client-secret",
        secrets_encrypted=False,
        sensors_api="https://sensors.example.com",
        device_ids=["dev-1", "dev-2"],
        token_table_name="tokens",
        token_endpoint="https://login.example.com/token",
        retry_queue_url="https://sqs.example.com/123/retries",
    )


@pytest.fixture
def table():
    return FakeTable()


@pytest.fixture
def http():
    return FakeHttp()


def make_activity(text="/sensors", **overrides):
    activity = {
        "type": "message",
        "id": "msg-1",
        "text": text,
        "channelId": "emulator",
        "serviceUrl": "https://smba.example.com/",
        "from": {"id": "user-1", "name": "Alice"},
        "recipient": {"id": "bot-1", "name": "sensorbot"},
        "conversation": {"id": "conv-1", "isGroup": False},
    }
    activity.update(overrides)
    return activity


def make_event(text="/sensors", expired=None, **overrides):
    event = {"httpMethod": "POST", "body": json.dumps(make_activity(text, **overrides))}
    if expired is not None:
        event["expired"] = expired
    return event


def device_json(name="Balcony", temperature=21.234, absolute=1012.3, sea_level=1015.6,
                timestamp="2026-10-19T08:30:00Z"):
    return {
        "name": name,
        "timestamp": timestamp,
        "sensors": [
            {"type": "temperature", "value": temperature},
            {"type": "absolutepressure", "value": absolute},
            {"type": "seaLevelPressure", "value": sea_level},
        ],
    }
