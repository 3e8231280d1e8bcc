"""
Cached boto3 clients, one per (service, region).
"""
import logging
import os
import threading
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config

from .constants import DEFAULT_REGION, GLOBAL_CLIENT_SERVICES, TRANSPORT_MAX_ATTEMPTS

logger = logging.getLogger(__name__)


def cache_key(service: str, region: Optional[str] = None) -> str:
    """Cache key for a client: "service-region", or just "service" when global."""
    if service in GLOBAL_CLIENT_SERVICES or not region:
        return service
    return f"{service}-{region}"


class ClientCache:
    """
    Lazily creates and memoizes boto3 clients.

    Global services (IAM, CloudFront, Route 53, Organizations) share one
    client pinned to us-east-1 regardless of the requested region.

    Usage:
        clients = ClientCache(boto3.Session(profile_name="prod"))
        ec2 = clients.get_client("ec2", "eu-west-1")
        iam = clients.get_client("iam")
    """

    def __init__(self, session: Optional[boto3.Session] = None, max_attempts: int = TRANSPORT_MAX_ATTEMPTS):
        self.session = session or boto3.Session()
        self.max_attempts = max_attempts
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def _resolve_region(self, service: str, region: Optional[str]) -> str:
        if service in GLOBAL_CLIENT_SERVICES:
            return DEFAULT_REGION
        return region or os.environ.get('AWS_REGION') or DEFAULT_REGION

    def get_client(self, service: str, region: Optional[str] = None):
        """Return the cached client for (service, region), creating it on first use."""
        key = cache_key(service, region)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client_region = self._resolve_region(service, region)
                logger.debug(f"Creating {service} client for {client_region}")
                client = self.session.client(
                    service,
                    region_name=client_region,
                    config=Config(retries={'max_attempts': self.max_attempts}),
                )
                self._clients[key] = client
            return client

    def clear_all(self) -> None:
        """Drop every cached client."""
        with self._lock:
            self._clients.clear()

    def refresh(self, session: boto3.Session) -> None:
        """Switch to a new session (e.g. refreshed credentials) and drop old clients."""
        self.session = session
        self.clear_all()
        logger.debug("Client cache cleared after credential refresh")

    def __len__(self) -> int:
        return len(self._clients)
