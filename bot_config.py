# bot_config.py - runtime settings read from the Lambda environment
import os
from dataclasses import dataclass, field
from typing import List, Optional

TOKEN_ENDPOINT = "https://login.microsoftonline.com/botframework.com/oauth2/v2.0/token"
BOT_FRAMEWORK_SCOPE = "https://api.botframework.com/.default"

# Used when neither SENSOR_DEVICE_IDS nor SENSOR_LOCATIONS is set.
DEFAULT_DEVICE_IDS = [
    "b764034949e0c8643f09689666669b8c",
    "b8f82803b0d69415ef92a36519fb1d81",
]

HELP_TEXT = (
    "Available commands:\n\n"
    "/current - latest readings\n\n"
    "/sensors - sensor status"
)

REPLY_NONE = "none"
REPLY_HELP = "help"

RETRY_SQS = "sqs"
RETRY_LAMBDA = "lambda"
RETRY_OFF = "off"


def _env_list(environ, name):
    raw = environ.get(name) or ""
    return [part.strip() for part in raw.split(",") if part.strip()]


def _env_bool(environ, name, default):
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    client_id: str = ""
    client_secret: str = ""
    secrets_encrypted: bool = True
    sensors_api: str = ""
    device_ids: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    token_table_name: Optional[str] = None
    token_cache_enabled: bool = True
    default_reply: str = REPLY_NONE
    help_text: str = HELP_TEXT
    retry_mode: str = RETRY_SQS
    retry_queue_url: Optional[str] = None
    retry_delay_seconds: int = 0
    function_name: Optional[str] = None
    region: str = "us-east-1"
    aws_endpoint: Optional[str] = None  # optional for LocalStack, e.g. http://localhost:4566
    token_endpoint: str = TOKEN_ENDPOINT
    http_timeout: float = 10.0
    display_timezone: str = "UTC"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ

        device_ids = _env_list(env, "SENSOR_DEVICE_IDS")
        locations = _env_list(env, "SENSOR_LOCATIONS")
        if not device_ids and not locations:
            device_ids = list(DEFAULT_DEVICE_IDS)

        default_reply = (env.get("DEFAULT_REPLY") or REPLY_NONE).strip().lower()
        if default_reply not in (REPLY_NONE, REPLY_HELP):
            raise ValueError("DEFAULT_REPLY must be 'none' or 'help', got %r" % default_reply)

        retry_mode = (env.get("RETRY_MODE") or RETRY_SQS).strip().lower()
        if retry_mode not in (RETRY_SQS, RETRY_LAMBDA, RETRY_OFF):
            raise ValueError("RETRY_MODE must be 'sqs', 'lambda' or 'off', got %r" % retry_mode)

        return cls(
            client_id=env.get("MS_BOT_CLIENT_ID", ""),
            client_secret=env.get("MS_BOT_CLIENT_SECRET", ""),
            secrets_encrypted=_env_bool(env, "SECRETS_ENCRYPTED", True),
            sensors_api=(env.get("SENSORS_API") or "").rstrip("/"),
            device_ids=device_ids,
            locations=locations,
            token_table_name=env.get("TOKEN_TABLE_NAME") or None,
            token_cache_enabled=_env_bool(env, "TOKEN_CACHE_ENABLED", True),
            default_reply=default_reply,
            help_text=env.get("HELP_TEXT") or HELP_TEXT,
            retry_mode=retry_mode,
            retry_queue_url=env.get("RETRY_QUEUE_URL") or None,
            retry_delay_seconds=int(env.get("RETRY_DELAY_SECONDS") or 0),
            function_name=env.get("AWS_LAMBDA_FUNCTION_NAME") or None,
            region=env.get("AWS_REGION") or env.get("SERVERLESS_REGION") or "us-east-1",
            aws_endpoint=env.get("AWS_ENDPOINT") or None,
            token_endpoint=env.get("TOKEN_ENDPOINT") or TOKEN_ENDPOINT,
            http_timeout=float(env.get("HTTP_TIMEOUT") or 10),
            display_timezone=env.get("DISPLAY_TIMEZONE") or "UTC",
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
