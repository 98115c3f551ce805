"""
Top-level API client handed to lifecycle handlers as their meta value.
"""

from jujuform.client.clouds import CloudsClient
from jujuform.client.connection import ConnectionFactory
from jujuform.config import ProviderConfig


class Client:
    """
    Bundles the facade clients around one connection factory.

    Example:
        client = Client(ProviderConfig.from_env())
        client.clouds.read_cloud(ReadCloudInput(name="localhost"))
    """

    def __init__(self, config: ProviderConfig, connection_factory=None):
        self.config = config
        self.connection_factory = connection_factory or ConnectionFactory(config)
        self.clouds = CloudsClient(self.connection_factory)

    def __repr__(self) -> str:
        return f"Client(controller_addresses={self.config.controller_addresses})"
