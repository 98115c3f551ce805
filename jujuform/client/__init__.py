"""
Controller API client.
"""

from jujuform.client.client import Client
from jujuform.client.clouds import (
    CloudsClient,
    ReadCloudInput,
    CreateCloudInput,
    UpdateCloudInput,
    RemoveCloudInput,
)
from jujuform.client.connection import Connection, ConnectionFactory
from jujuform.client.params import Cloud, CloudParams, CloudRegion, cloud_from_params

__all__ = [
    "Client",
    "CloudsClient",
    "ReadCloudInput",
    "CreateCloudInput",
    "UpdateCloudInput",
    "RemoveCloudInput",
    "Connection",
    "ConnectionFactory",
    "Cloud",
    "CloudParams",
    "CloudRegion",
    "cloud_from_params",
]
