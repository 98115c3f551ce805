"""
Cloud facade client: create, read, update and remove clouds.

Every call opens its own connection and closes it before returning.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from jujuform.client.params import (
    Cloud,
    CloudParams,
    cloud_from_params,
    cloud_tag,
    name_from_tag,
)
from jujuform.errors import APIError

logger = logging.getLogger(__name__)

CLOUD_FACADE = "Cloud"
CLOUD_FACADE_VERSION = 7


@dataclass
class ReadCloudInput:
    name: str


@dataclass
class CreateCloudInput:
    name: str
    params: CloudParams


@dataclass
class UpdateCloudInput:
    name: str
    params: CloudParams


@dataclass
class RemoveCloudInput:
    name: str


class CloudsClient:
    """
    Client for the controller's Cloud facade.

    Args:
        connection_factory: Anything with a get_connection() method that
            returns a context-managed Connection

    Example:
        clouds = CloudsClient(ConnectionFactory(config))
        cloud = clouds.read_cloud(ReadCloudInput(name="lxd"))
    """

    def __init__(self, connection_factory: Any):
        self.connection_factory = connection_factory

    def read_cloud(self, input: ReadCloudInput) -> Cloud:
        """
        Fetch a cloud definition by name.

        Raises:
            NotFoundError: If no cloud has that name
            APIError: For any other controller error
        """
        response = self._call(
            "Cloud", {"entities": [{"tag": cloud_tag(input.name)}]}
        )
        result = _single_result(response, "Cloud")
        try:
            params = CloudParams.model_validate(result.get("cloud") or {})
        except ValidationError as e:
            raise APIError(f"Cloud: unexpected cloud definition for {input.name}: {e}") from e
        return cloud_from_params(input.name, params)

    def create_cloud(self, input: CreateCloudInput) -> None:
        """Register a new cloud with the controller."""
        logger.debug("Adding cloud %s of type %s", input.name, input.params.type)
        self._call(
            "AddCloud",
            {
                "cloud": input.params.to_wire(),
                "name": input.name,
                "force": False,
            },
        )

    def update_cloud(self, input: UpdateCloudInput) -> None:
        """Replace a cloud definition wholesale."""
        logger.debug("Updating cloud %s", input.name)
        response = self._call(
            "UpdateCloud",
            {"clouds": [{"cloud": input.params.to_wire(), "name": input.name}]},
        )
        _single_result(response, "UpdateCloud")

    def remove_cloud(self, input: RemoveCloudInput) -> None:
        logger.debug("Removing cloud %s", input.name)
        response = self._call(
            "RemoveClouds", {"entities": [{"tag": cloud_tag(input.name)}]}
        )
        _single_result(response, "RemoveClouds")

    def default_cloud(self) -> str:
        """Name of the cloud the controller itself runs on."""
        response = self._call("DefaultCloud")
        if response.get("error"):
            raise APIError.from_reply(response["error"])
        try:
            return name_from_tag(response.get("result", ""))
        except ValueError as e:
            raise APIError(f"DefaultCloud: {e}") from e

    def _call(self, request: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        with self.connection_factory.get_connection() as conn:
            return conn.rpc(CLOUD_FACADE, CLOUD_FACADE_VERSION, request, params)


def _single_result(response: dict[str, Any], request: str) -> dict[str, Any]:
    """Unpack a bulk reply made for exactly one entity."""
    results = response.get("results") or []
    if len(results) != 1:
        raise APIError(f"{request}: expected 1 result, got {len(results)}")
    result = results[0] or {}
    if result.get("error"):
        raise APIError.from_reply(result["error"])
    return result
