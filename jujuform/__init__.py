"""
jujuform: declarative resources for a Juju controller.

Each resource maps declarative attributes onto controller API calls:
create, read, update and delete translate between a ResourceData view
and the controller's facades.

Example:
    from jujuform import Provider

    provider = Provider.from_env()
    client = provider.configure()

    cloud = provider.resource("juju_cloud")
    d = cloud.data(plan={
        "name": "lxd-remote",
        "type": "lxd",
        "endpoint": "https://lxd.internal:8443",
        "auth_types": ["certificate"],
    })
    diags = cloud.create(d, client)
    if not diags.has_error():
        state = d.state()
"""

from jujuform.config import ProviderConfig
from jujuform.diag import Diagnostic, Diagnostics, Severity
from jujuform.provider import Provider
from jujuform.resources import resource_cloud
from jujuform.schema import Resource, ResourceData, Schema, ValueType
from jujuform.log import setup_logging

__version__ = "0.1.0"
__all__ = [
    "Provider",
    "ProviderConfig",
    "Diagnostic",
    "Diagnostics",
    "Severity",
    "Resource",
    "ResourceData",
    "Schema",
    "ValueType",
    "resource_cloud",
    "setup_logging",
]
