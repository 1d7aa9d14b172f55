# bot_auth.py - Bot Framework client-credentials token, cached or fresh
import json
import logging
import urllib.error
import urllib.parse

from botocore.exceptions import BotoCoreError, ClientError

import http_client
from bot_config import BOT_FRAMEWORK_SCOPE
from kms_secrets import SecretDecryptionError

LOG = logging.getLogger(__name__)


class AuthenticationError(Exception):
    pass


class Authenticator:
    def __init__(self, settings, secrets, cache, http=http_client.request):
        self.settings = settings
        self.secrets = secrets
        self.cache = cache
        self.http = http

    def authenticate(self, force_refresh: bool = False) -> str:
        """Return a bearer token.

        With the cache enabled a normal call only reads the cache and may
        return "" when nothing is stored. ``force_refresh`` (or a disabled
        cache) always performs the client-credentials exchange.
        """
        if self.settings.token_cache_enabled and not force_refresh:
            return self.cache.get()

        token = self.exchange()
        if self.settings.token_cache_enabled:
            self.cache.put(token)
            LOG.info("Stored refreshed bot token")
        return token

    def exchange(self) -> str:
        try:
            client_id, client_secret = self.secrets.decrypt(
                [self.settings.client_id, self.settings.client_secret])
        except (SecretDecryptionError, ClientError, BotoCoreError) as e:
            raise AuthenticationError("Could not decrypt bot credentials") from e

        params = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "scope": BOT_FRAMEWORK_SCOPE,
        }
        try:
            resp = self.http(
                self.settings.token_endpoint,
                method="POST",
                data=urllib.parse.urlencode(params).encode("utf-8"),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.settings.http_timeout,
            )
        except (urllib.error.URLError, OSError) as e:
            raise AuthenticationError("Token endpoint unreachable: %s" % e) from e

        if resp.status != 200:
            raise AuthenticationError("Token endpoint returned HTTP %s" % resp.status)
        try:
            payload = resp.json()
        except ValueError as e:
            raise AuthenticationError("Token endpoint returned invalid JSON") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise AuthenticationError("Token endpoint response has no access_token: %s"
                                      % json.dumps(payload)[:200])
        return token
