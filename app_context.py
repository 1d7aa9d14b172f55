# app_context.py - AWS clients and collaborators, built once per Lambda container
import logging
from dataclasses import dataclass

import boto3

from bot_auth import Authenticator
from bot_config import RETRY_LAMBDA, RETRY_SQS, Settings
from kms_secrets import SecretResolver
from retry_dispatch import RetryDispatcher
from sensors_api import SensorClient
from token_cache import TokenCache

LOG = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    authenticator: Authenticator
    sensors: SensorClient
    dispatcher: RetryDispatcher


def build_context(settings: Settings = None) -> AppContext:
    settings = settings or Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    boto_kwargs = {"region_name": settings.region}
    if settings.aws_endpoint:
        boto_kwargs["endpoint_url"] = settings.aws_endpoint

    kms = boto3.client("kms", **boto_kwargs) if settings.secrets_encrypted else None
    secrets = SecretResolver(kms, encrypted=settings.secrets_encrypted)

    table = None
    if settings.token_cache_enabled:
        if settings.token_table_name:
            dynamodb = boto3.resource("dynamodb", **boto_kwargs)
            table = dynamodb.Table(settings.token_table_name)
        else:
            LOG.warning("TOKEN_CACHE_ENABLED but TOKEN_TABLE_NAME is not set; cache reads will be empty")

    sqs = boto3.client("sqs", **boto_kwargs) if settings.retry_mode == RETRY_SQS else None
    lambda_client = boto3.client("lambda", **boto_kwargs) if settings.retry_mode == RETRY_LAMBDA else None

    return AppContext(
        settings=settings,
        authenticator=Authenticator(settings, secrets, TokenCache(table)),
        sensors=SensorClient(settings.sensors_api, timeout=settings.http_timeout),
        dispatcher=RetryDispatcher(
            mode=settings.retry_mode,
            sqs=sqs,
            queue_url=settings.retry_queue_url,
            lambda_client=lambda_client,
            function_name=settings.function_name,
            delay_seconds=settings.retry_delay_seconds,
        ),
    )
