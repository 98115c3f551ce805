"""
juju_cloud: a cloud registered with the controller.

Maps the resource attributes onto the Cloud facade. Updates are
wholesale: any tracked attribute change re-submits the whole cloud.
"""

import logging
from typing import Any

from jujuform.client import (
    Client,
    Cloud,
    CloudParams,
    CloudRegion,
    CreateCloudInput,
    ReadCloudInput,
    RemoveCloudInput,
    UpdateCloudInput,
)
from jujuform.diag import Diagnostics
from jujuform.errors import JujuformError, ResourceIdError
from jujuform.schema import (
    Resource,
    ResourceData,
    Schema,
    ValueType,
    import_state_passthrough,
)

logger = logging.getLogger(__name__)

ID_PREFIX = "cloud"

# Attributes whose change triggers an UpdateCloud call
UPDATABLE_ATTRIBUTES = (
    "host_cloud_region",
    "auth_types",
    "endpoint",
    "identity_endpoint",
    "storage_endpoint",
    "config",
    "ca_certificates",
    "skip_tls_verify",
    "regions",
    "region_config",
)


def resource_cloud() -> Resource:
    return Resource(
        description="A resource that represents a Juju Cloud.",
        create=resource_cloud_create,
        read=resource_cloud_read,
        update=resource_cloud_update,
        delete=resource_cloud_delete,
        importer=import_state_passthrough,
        schema={
            "name": Schema(
                type=ValueType.STRING,
                description="The name to be assigned to the cloud",
                required=True,
                force_new=True,
            ),
            "type": Schema(
                type=ValueType.STRING,
                description="The type of cloud (e.g. ec2, openstack, lxd)",
                required=True,
                force_new=True,
            ),
            "host_cloud_region": Schema(
                type=ValueType.STRING,
                description="Represents the k8s host cloud. The format is <cloudType>/<region>",
                optional=True,
            ),
            "auth_types": Schema(
                type=ValueType.LIST,
                description="The authentication modes supported by the cloud",
                elem=Schema(type=ValueType.STRING),
                required=True,
            ),
            "endpoint": Schema(
                type=ValueType.STRING,
                description="The default endpoint for the cloud regions",
                optional=True,
            ),
            "identity_endpoint": Schema(
                type=ValueType.STRING,
                description="The default identity endpoint for the cloud regions",
                optional=True,
            ),
            "storage_endpoint": Schema(
                type=ValueType.STRING,
                description="The default storage endpoint for the cloud regions",
                optional=True,
            ),
            "regions": Schema(
                type=ValueType.SET,
                description="Regions available within the cloud",
                optional=True,
                # Computed so regions the controller fills in are kept
                computed=True,
                elem=Resource(
                    schema={
                        "name": Schema(
                            type=ValueType.STRING,
                            description="The name of the region",
                            required=True,
                        ),
                        "endpoint": Schema(
                            type=ValueType.STRING,
                            description="The endpoint URL for this region",
                            optional=True,
                        ),
                        "identity_endpoint": Schema(
                            type=ValueType.STRING,
                            description="The identity endpoint URL for this region",
                            optional=True,
                        ),
                        "storage_endpoint": Schema(
                            type=ValueType.STRING,
                            description="The storage endpoint URL for this region",
                            optional=True,
                        ),
                    },
                ),
            ),
            "config": Schema(
                type=ValueType.MAP,
                description="Optional cloud-specific configuration",
                elem=Schema(type=ValueType.STRING),
                optional=True,
            ),
            "region_config": Schema(
                type=ValueType.SET,
                description="Optional region-specific configuration",
                optional=True,
                computed=True,
                elem=Resource(
                    schema={
                        "name": Schema(
                            type=ValueType.STRING,
                            description="Name of the region config applies to",
                            required=True,
                        ),
                        "config": Schema(
                            type=ValueType.MAP,
                            description="Config applied to region",
                            required=True,
                            elem=Schema(type=ValueType.STRING),
                        ),
                    },
                ),
            ),
            "ca_certificates": Schema(
                type=ValueType.LIST,
                description="List of CA certs to be used to validate certificates of cloud infrastructure components.",
                elem=Schema(type=ValueType.STRING),
                optional=True,
            ),
            "skip_tls_verify": Schema(
                type=ValueType.BOOL,
                description="Skip certificate validation. Not recommended for production clouds.",
                optional=True,
                default=False,
            ),
            "is_controller_cloud": Schema(
                type=ValueType.BOOL,
                description="True when this is the cloud used by the controller",
                computed=True,
            ),
        },
    )


def resource_cloud_create(d: ResourceData, meta: Client) -> Diagnostics:
    client = meta
    name = d.get("name")

    cloud_params = prepare_cloud_input(d)

    logger.info("Creating cloud %s", name)
    try:
        client.clouds.create_cloud(CreateCloudInput(name=name, params=cloud_params))
    except JujuformError as e:
        return Diagnostics.from_err(e)

    d.set_id(f"{ID_PREFIX}:{name}")

    return resource_cloud_read(d, meta)


def resource_cloud_read(d: ResourceData, meta: Client) -> Diagnostics:
    client = meta

    try:
        name = parse_cloud_id(d.id())
        response = client.clouds.read_cloud(ReadCloudInput(name=name))
        controller_cloud = client.clouds.default_cloud()
    except JujuformError as e:
        return Diagnostics.from_err(e)

    try:
        for key, value in _flatten_cloud(response).items():
            d.set(key, value)
        d.set("is_controller_cloud", response.name == controller_cloud)
    except JujuformError as e:
        return Diagnostics.from_err(e)

    return Diagnostics()


def resource_cloud_update(d: ResourceData, meta: Client) -> Diagnostics:
    client = meta
    name = d.get("name")

    replaced = d.changed_force_new()
    if replaced:
        return Diagnostics.errorf(
            "cannot update %s of cloud %s in place", ", ".join(replaced), name
        )

    if not any(d.has_change(key) for key in UPDATABLE_ATTRIBUTES):
        logger.debug("No changes for cloud %s", name)
        return Diagnostics()

    cloud_params = prepare_cloud_input(d)

    logger.info("Updating cloud %s", name)
    try:
        client.clouds.update_cloud(UpdateCloudInput(name=name, params=cloud_params))
    except JujuformError as e:
        return Diagnostics.from_err(e)

    return Diagnostics()


def resource_cloud_delete(d: ResourceData, meta: Client) -> Diagnostics:
    client = meta
    name = d.get("name")

    logger.info("Removing cloud %s", name)
    try:
        client.clouds.remove_cloud(RemoveCloudInput(name=name))
    except JujuformError as e:
        return Diagnostics.from_err(e)

    d.set_id("")

    return Diagnostics()


def parse_cloud_id(id: str) -> str:
    """
    Extract the cloud name from a resource id of the form "cloud:<name>".

    Raises:
        ResourceIdError: If the id does not have that form
    """
    prefix, sep, name = id.partition(":")
    if prefix != ID_PREFIX or not sep or not name:
        raise ResourceIdError(f"invalid cloud id {id!r}, expected {ID_PREFIX}:<name>")
    return name


def parse_regions(regions: list[CloudRegion]) -> list[dict[str, Any]]:
    """API regions to region blocks; empty endpoints are left out."""
    cloud_regions = []
    for region in regions:
        r: dict[str, Any] = {"name": region.name}
        if region.endpoint:
            r["endpoint"] = region.endpoint
        if region.identity_endpoint:
            r["identity_endpoint"] = region.identity_endpoint
        if region.storage_endpoint:
            r["storage_endpoint"] = region.storage_endpoint
        cloud_regions.append(r)
    return cloud_regions


def parse_region_config(region_config: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
    """Region config map to region_config blocks, ordered by region name."""
    return [
        {"name": region, "config": dict(config)}
        for region, config in sorted(region_config.items())
    ]


def prepare_cloud_input(d: ResourceData) -> CloudParams:
    """Build the API request from the planned attribute values."""
    regions = [
        CloudRegion(
            name=r["name"],
            endpoint=r["endpoint"],
            identity_endpoint=r["identity_endpoint"],
            storage_endpoint=r["storage_endpoint"],
        )
        for r in d.get("regions")
    ]
    region_config = {r["name"]: r["config"] for r in d.get("region_config")}

    return CloudParams(
        type=d.get("type"),
        host_cloud_region=d.get("host_cloud_region"),
        auth_types=d.get("auth_types"),
        endpoint=d.get("endpoint"),
        identity_endpoint=d.get("identity_endpoint"),
        storage_endpoint=d.get("storage_endpoint"),
        regions=regions,
        region_config=region_config,
        config=d.get("config"),
        ca_certificates=d.get("ca_certificates"),
        skip_tls_verify=d.get("skip_tls_verify"),
    )


def _flatten_cloud(cloud: Cloud) -> dict[str, Any]:
    return {
        "name": cloud.name,
        "type": cloud.type,
        "host_cloud_region": cloud.host_cloud_region,
        "auth_types": cloud.auth_types,
        "endpoint": cloud.endpoint,
        "identity_endpoint": cloud.identity_endpoint,
        "storage_endpoint": cloud.storage_endpoint,
        "config": cloud.config,
        "ca_certificates": cloud.ca_certificates,
        "skip_tls_verify": cloud.skip_tls_verify,
        "regions": parse_regions(cloud.regions),
        "region_config": parse_region_config(cloud.region_config),
    }
