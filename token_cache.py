# token_cache.py - single Bot Framework token kept in DynamoDB
import logging
from datetime import datetime, timezone

from botocore.exceptions import BotoCoreError, ClientError

LOG = logging.getLogger(__name__)

TOKEN_KEY = "token"


def now_iso():
    return datetime.now(timezone.utc).isoformat()


class TokenCache:
    """Reads and overwrites the item ``{"id": "token"}``.

    Failures never leave this class: a failed read is an empty token and a
    failed write is only logged. Concurrent writers are last-write-wins.
    """

    def __init__(self, table=None):
        self.table = table

    def get(self) -> str:
        if self.table is None:
            return ""
        try:
            resp = self.table.get_item(Key={"id": TOKEN_KEY})
        except (ClientError, BotoCoreError) as e:
            LOG.warning("Token cache read failed, treating as empty: %s", e)
            return ""
        item = resp.get("Item") or {}
        token = item.get("token") or ""
        if not token:
            LOG.info("No cached token found")
        return token

    def put(self, token: str) -> bool:
        if self.table is None:
            return False
        item = {
            "id": TOKEN_KEY,
            "token": token,
            "created": now_iso(),
        }
        try:
            self.table.put_item(Item=item)
        except (ClientError, BotoCoreError) as e:
            LOG.warning("Token cache write failed: %s", e)
            return False
        return True
