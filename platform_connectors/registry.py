"""
Connector Registry.

Maps each Platform to the connector that fetches it. The
aggregator looks connectors up here; tests register fakes.
"""

import logging
from typing import Dict, Iterator, Optional

from core.settings import Settings
from platform_metrics.types import Platform

from .blogs import DevToConnector, HashnodeConnector, MediumConnector
from .github import GitHubConnector
from .linkedin import LinkedInManualConnector, ManualEntryStore
from .twitter import TwitterConnector


logger = logging.getLogger(__name__)


class ConnectorRegistry:
    """Platform -> connector lookup."""

    def __init__(self) -> None:
        self._connectors: Dict[Platform, object] = {}

    def register(self, connector) -> None:
        platform = connector.platform
        if platform in self._connectors:
            logger.info(f"Replacing connector for {platform.value}")
        self._connectors[platform] = connector

    def get(self, platform: Platform):
        return self._connectors.get(platform)

    def __contains__(self, platform: Platform) -> bool:
        return platform in self._connectors

    def __iter__(self) -> Iterator[Platform]:
        return iter(self._connectors)

    async def close(self) -> None:
        """Close every connector that holds network resources."""
        for connector in self._connectors.values():
            close = getattr(connector, "close", None)
            if close is not None:
                await close()


def build_default_registry(
    settings: Optional[Settings] = None,
    manual_store: Optional[ManualEntryStore] = None,
) -> ConnectorRegistry:
    """
    Registry with every supported connector.

    LinkedIn is registered only when a manual entry store is given.
    """
    settings = settings or Settings()
    timeout = settings.http_timeout_seconds

    registry = ConnectorRegistry()
    registry.register(GitHubConnector(token=settings.github_token, timeout=timeout))
    registry.register(TwitterConnector(bearer_token=settings.twitter_bearer_token, timeout=timeout))
    registry.register(DevToConnector(api_key=settings.devto_api_key, timeout=timeout))
    registry.register(HashnodeConnector(token=settings.hashnode_token, timeout=timeout))
    registry.register(MediumConnector(timeout=timeout))
    if manual_store is not None:
        registry.register(LinkedInManualConnector(manual_store))
    return registry
