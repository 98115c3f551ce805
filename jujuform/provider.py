"""
The Juju provider: configuration plus the resources it manages.

Example:
    from jujuform import Provider
    from jujuform.config import ProviderConfig

    provider = Provider(config=ProviderConfig.from_env())
    client = provider.configure()

    cloud = provider.resource("juju_cloud")
    d = cloud.data(plan={"name": "lxd-remote", "type": "lxd", "auth_types": ["certificate"]})
    diags = cloud.create(d, client)
"""

import logging
from typing import Any

from jujuform.client import Client
from jujuform.config import ProviderConfig
from jujuform.resources import resource_cloud
from jujuform.schema import Resource

logger = logging.getLogger(__name__)

PROVIDER_NAME = "juju"


class Provider:
    """
    Holds the controller configuration and the resource registry.

    Args:
        config: Controller connection configuration
        connection_factory: Optional replacement for the websocket
            connection factory (used by tests)
    """

    def __init__(self, config: ProviderConfig, connection_factory: Any = None):
        if config is None:
            raise TypeError(
                "Provider requires a config object. "
                "Example: Provider(config=ProviderConfig.from_env())"
            )
        self.config = config
        self.connection_factory = connection_factory
        self.resources: dict[str, Resource] = {
            f"{PROVIDER_NAME}_cloud": resource_cloud(),
        }

    @classmethod
    def from_env(cls, **kwargs) -> "Provider":
        """
        Create a provider from JUJU_* environment variables, falling back
        to the local Juju client store.
        """
        return cls(config=ProviderConfig.from_env(**kwargs))

    def configure(self) -> Client:
        """Build the API client passed to lifecycle handlers as meta."""
        logger.debug(
            "Configuring provider for controller %s", self.config.controller_addresses
        )
        return Client(self.config, connection_factory=self.connection_factory)

    def resource(self, type_name: str) -> Resource:
        try:
            return self.resources[type_name]
        except KeyError:
            raise KeyError(
                f"Unknown resource type '{type_name}'. "
                f"Available: {sorted(self.resources)}"
            ) from None

    def __repr__(self) -> str:
        return f"Provider(name='{PROVIDER_NAME}', resources={sorted(self.resources)})"
