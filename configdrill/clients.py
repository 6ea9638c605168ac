"""Lazy boto3 client pool built from drill settings."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

import boto3
from botocore.config import Config

from .naming import mask_identifier
from .settings import Settings

logger = logging.getLogger(__name__)

_CLIENT_CONFIG = Config(user_agent_extra="config-drill")


def build_session(settings: Settings) -> boto3.Session:
    """Create a boto3 session from static keys or a named profile."""
    if settings.aws_profile:
        return boto3.Session(profile_name=settings.aws_profile, region_name=settings.aws_region)
    return boto3.Session(
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        aws_session_token=settings.aws_session_token,
        region_name=settings.aws_region,
    )


class ClientPool(Mapping[str, Any]):
    """Mapping of service name to boto3 client; clients are created on first use."""

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[Any] = None,
        session_factory: Callable[[Settings], Any] = build_session,
    ) -> None:
        self.settings = settings
        self._session = session
        self._session_factory = session_factory
        self._clients: Dict[str, Any] = {}

    @property
    def session(self) -> Any:
        if self._session is None:
            self._session = self._session_factory(self.settings)
        return self._session

    def __getitem__(self, service: str) -> Any:
        client = self._clients.get(service)
        if client is None:
            logger.debug("Creating %s client in %s", service, self.settings.aws_region)
            client = self.session.client(service, region_name=self.settings.aws_region, config=_CLIENT_CONFIG)
            self._clients[service] = client
        return client

    def __iter__(self) -> Iterator[str]:
        return iter(self._clients)

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, service: object) -> bool:
        return isinstance(service, str)


def resolve_account_id(settings: Settings, clients: Mapping[str, Any]) -> str:
    """Return AWS_ACCOUNT_ID, falling back to STS and caching the answer on settings."""
    if settings.account_id:
        return settings.account_id
    account_id = clients["sts"].get_caller_identity()["Account"]
    logger.info("Resolved account %s via STS", mask_identifier(account_id))
    settings.account_id = account_id
    return account_id
