# kms_secrets.py - decrypts KMS-encrypted environment values
import base64
import binascii
import logging
from typing import Iterable, List

LOG = logging.getLogger(__name__)


class SecretDecryptionError(Exception):
    pass


class SecretResolver:
    """Turns base64 KMS ciphertexts into plaintext strings.

    With ``encrypted=False`` values are returned unchanged, which is what
    local runs against the mock server use.
    """

    def __init__(self, kms=None, encrypted: bool = True):
        self.kms = kms
        self.encrypted = encrypted

    def decrypt(self, values: Iterable[str]) -> List[str]:
        values = list(values)
        if not self.encrypted:
            return values
        return [self._decrypt_one(value) for value in values]

    def _decrypt_one(self, value: str) -> str:
        if not value:
            raise SecretDecryptionError("Encrypted value is not configured")
        try:
            blob = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise SecretDecryptionError("Encrypted value is not valid base64") from e
        resp = self.kms.decrypt(CiphertextBlob=blob)
        plaintext = resp["Plaintext"]
        if isinstance(plaintext, bytes):
            return plaintext.decode("utf-8")
        return str(plaintext)
