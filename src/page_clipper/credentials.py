"""Credential storage for the store token, space id and model key."""

import logging
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SERVICE_NAME = "page-clipper"

STORE_TOKEN = "store_token"
SPACE_ID = "space_id"
AI_KEY = "ai_key"


class CredentialStore(Protocol):
    """Secure key-value store keyed by service and account."""

    def get(self, service: str, account: str) -> str | None: ...

    def put(self, service: str, account: str, value: str) -> bool: ...

    def delete(self, service: str, account: str) -> bool: ...


class KeyringCredentialStore:
    """Credential store backed by the operating system keychain."""

    def get(self, service: str, account: str) -> str | None:
        try:
            return keyring.get_password(service, account)
        except KeyringError:
            logger.warning("Could not read %s/%s from keyring", service, account, exc_info=True)
            return None

    def put(self, service: str, account: str, value: str) -> bool:
        try:
            keyring.set_password(service, account, value)
        except KeyringError:
            logger.warning("Could not save %s/%s to keyring", service, account, exc_info=True)
            return False
        return True

    def delete(self, service: str, account: str) -> bool:
        try:
            keyring.delete_password(service, account)
        except PasswordDeleteError:
            # Not configured
            return False
        return True


class MemoryCredentialStore:
    """In-process credential store."""

    def __init__(self, values: dict[tuple[str, str], str] | None = None):
        self._values = dict(values or {})

    def get(self, service: str, account: str) -> str | None:
        return self._values.get((service, account))

    def put(self, service: str, account: str, value: str) -> bool:
        self._values[(service, account)] = value
        return True

    def delete(self, service: str, account: str) -> bool:
        return self._values.pop((service, account), None) is not None


class Credentials(BaseModel):
    """Already-issued credentials for the two remote services."""

    store_token: str = ""
    space_id: str = ""
    ai_key: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.store_token and self.space_id and self.ai_key)

    @classmethod
    def load(cls, store: CredentialStore, service: str = SERVICE_NAME) -> "Credentials":
        return cls(
            store_token=store.get(service, STORE_TOKEN) or "",
            space_id=store.get(service, SPACE_ID) or "",
            ai_key=store.get(service, AI_KEY) or "",
        )

    def save(self, store: CredentialStore, service: str = SERVICE_NAME) -> bool:
        saved = True
        for account, value in (
            (STORE_TOKEN, self.store_token),
            (SPACE_ID, self.space_id),
            (AI_KEY, self.ai_key),
        ):
            if value:
                saved = store.put(service, account, value) and saved
        return saved

    def __repr__(self) -> str:
        return f"Credentials(space_id={self.space_id!r}, valid={self.is_valid})"

    __str__ = __repr__
