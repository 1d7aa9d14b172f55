"""
Tests for the Authenticator: cached reads, forced refresh and exchange failures.
"""

import urllib.error
import urllib.parse
from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from bot_auth import AuthenticationError, Authenticator
from bot_config import BOT_FRAMEWORK_SCOPE
from kms_secrets import SecretResolver
from token_cache import TOKEN_KEY, TokenCache


@pytest.fixture
def auth(settings, table, http):
    return Authenticator(settings, SecretResolver(encrypted=False), TokenCache(table), http=http)


class TestCachedPath:

    def test_reads_cache_without_exchange(self, auth, table, http):
        table.items[TOKEN_KEY] = {"id": TOKEN_KEY, "token": "cached", "created": "x"}

        assert auth.authenticate(False) == "cached"
        assert http.calls == []

    def test_empty_cache_yields_empty_token(self, auth, http):
        assert auth.authenticate() == ""
        assert http.calls == []

    def test_repeated_reads_are_stable(self, auth, table):
        table.items[TOKEN_KEY] = {"id": TOKEN_KEY, "token": "cached", "created": "x"}

        assert auth.authenticate(False) == auth.authenticate(False) == "cached"
        assert table.put_calls == 0


class TestForceRefresh:

    def test_exchange_request(self, auth, settings, http):
        http.add("login.example.com", body={"access_token": "fresh", "expires_in": 3600})

        assert auth.authenticate(True) == "fresh"

        call = http.calls[0]
        assert call["url"] == settings.token_endpoint
        assert call["method"] == "POST"
        assert call["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        form = dict(urllib.parse.parse_qsl(call["data"].decode("utf-8")))
        assert form == {
            "grant_type": "client_credentials",
            "client_id": "client-id",
            "client_secret": "client-secret",
            "scope": BOT_FRAMEWORK_SCOPE,
        }

    def test_refresh_overwrites_cache(self, auth, table, http):
        table.items[TOKEN_KEY] = {"id": TOKEN_KEY, "token": "stale", "created": "x"}
        http.add("login.example.com", body={"access_token": "fresh"})

        auth.authenticate(True)

        assert table.items[TOKEN_KEY]["token"] == "fresh"
        assert auth.authenticate(False) == "fresh"

    def test_cache_disabled_always_exchanges(self, settings, table, http):
        settings = replace(settings, token_cache_enabled=False)
        auth = Authenticator(settings, SecretResolver(encrypted=False), TokenCache(table), http=http)
        http.add("login.example.com", body={"access_token": "fresh"})

        assert auth.authenticate(False) == "fresh"
        assert auth.authenticate(False) == "fresh"
        assert len(http.calls) == 2
        assert table.put_calls == 0

    def test_cache_write_failure_still_returns_token(self, settings, http):
        table = MagicMock()
        table.put_item.side_effect = ClientError(
            {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}}, "PutItem")
        auth = Authenticator(settings, SecretResolver(encrypted=False), TokenCache(table), http=http)
        http.add("login.example.com", body={"access_token": "fresh"})

        assert auth.authenticate(True) == "fresh"
        table.put_item.assert_called_once()

    def test_decrypts_credentials_with_kms(self, settings, table, http):
        kms = MagicMock()
        kms.decrypt.side_effect = [{"Plaintext": b"real-id"}, {"Plaintext": b"real-secret"}]
        settings = replace(settings, client_id="aWQ=", client_secret="c2VjcmV0")
        auth = Authenticator(settings, SecretResolver(kms), TokenCache(table), http=http)
        http.add("login.example.com", body={"access_token": "fresh"})

        auth.authenticate(True)

        form = dict(urllib.parse.parse_qsl(http.calls[0]["data"].decode("utf-8")))
        assert form["client_id"] == "real-id"
        assert form["client_secret"] == "real-secret"


class TestExchangeFailures:

    def test_error_status(self, auth, http, table):
        http.add("login.example.com", status=401, body={"error": "invalid_client"})

        with pytest.raises(AuthenticationError, match="401"):
            auth.authenticate(True)
        assert table.put_calls == 0

    def test_invalid_json(self, auth, http):
        http.add("login.example.com", body=b"not json")
        with pytest.raises(AuthenticationError):
            auth.authenticate(True)

    def test_missing_access_token(self, auth, http):
        http.add("login.example.com", body={"token_type": "Bearer"})
        with pytest.raises(AuthenticationError, match="access_token"):
            auth.authenticate(True)

    def test_unreachable(self, auth, http):
        http.add("login.example.com", raises=urllib.error.URLError("timed out"))
        with pytest.raises(AuthenticationError):
            auth.authenticate(True)

    def test_missing_encrypted_secret(self, settings, table, http):
        settings = replace(settings, client_id="")
        auth = Authenticator(settings, SecretResolver(MagicMock()), TokenCache(table), http=http)

        with pytest.raises(AuthenticationError):
            auth.authenticate(True)
        assert http.calls == []
