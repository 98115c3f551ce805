"""
Provider configuration: where the controller is and how to log in.

Values cascade from the most specific source to the least:
explicit keyword arguments, then JUJU_* environment variables, then the
local Juju client store (controllers.yaml / accounts.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from jujuform.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_CONTROLLER_ADDRESSES = "JUJU_CONTROLLER_ADDRESSES"
ENV_USERNAME = "JUJU_USERNAME"
ENV_PASSWORD = "JUJU_PASSWORD"
ENV_CA_CERT = "JUJU_CA_CERT"
ENV_JUJU_DATA = "JUJU_DATA"

DEFAULT_JUJU_DATA = "~/.local/share/juju"


class ProviderConfig(BaseModel):
    """
    Controller connection configuration.

    Example:
        config = ProviderConfig(
            controller_addresses=["10.0.0.10:17070"],
            username="admin",
            password="s3cret",
            ca_certificate=open("ca.pem").read(),
        )

        provider = Provider(config=config)
    """

    controller_addresses: list[str] = Field(
        ..., description="Controller API addresses as host:port"
    )
    username: str = Field(..., description="Controller user name")
    password: str = Field(..., description="Controller user password")
    ca_certificate: str | None = Field(
        default=None, description="PEM CA certificate of the controller"
    )
    timeout: float = Field(
        default=30.0, description="Connection and request timeout in seconds"
    )

    class Config:
        arbitrary_types_allowed = True

    @field_validator("controller_addresses")
    @classmethod
    def _addresses_not_empty(cls, v: list[str]) -> list[str]:
        addresses = [a.strip() for a in v if a and a.strip()]
        if not addresses:
            raise ValueError("at least one controller address is required")
        return addresses

    @classmethod
    def load(cls, juju_data: str | Path | None = None, **overrides: Any) -> "ProviderConfig":
        """
        Resolve configuration from overrides, environment and client store.

        Args:
            juju_data: Juju client store directory (default $JUJU_DATA or
                ~/.local/share/juju)
            **overrides: Explicit field values; None values are ignored

        Raises:
            ConfigError: If a required value cannot be found anywhere
        """
        values = _from_client_store(juju_data)
        values.update(_from_env())
        values.update({k: v for k, v in overrides.items() if v is not None})

        missing = [
            name
            for name in ("controller_addresses", "username", "password")
            if not values.get(name)
        ]
        if missing:
            raise ConfigError(
                f"missing provider configuration: {', '.join(missing)}. "
                f"Set {ENV_CONTROLLER_ADDRESSES}, {ENV_USERNAME} and {ENV_PASSWORD} "
                "or log in with the juju client"
            )

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"invalid provider configuration: {e}") from e

    @classmethod
    def from_env(cls, **overrides: Any) -> "ProviderConfig":
        """Shorthand for load() using the default client store location."""
        return cls.load(**overrides)


def _from_env() -> dict[str, Any]:
    values: dict[str, Any] = {}

    addresses = os.environ.get(ENV_CONTROLLER_ADDRESSES)
    if addresses:
        values["controller_addresses"] = addresses.split(",")
    if os.environ.get(ENV_USERNAME):
        values["username"] = os.environ[ENV_USERNAME]
    if os.environ.get(ENV_PASSWORD):
        values["password"] = os.environ[ENV_PASSWORD]
    if os.environ.get(ENV_CA_CERT):
        values["ca_certificate"] = os.environ[ENV_CA_CERT]

    return values


def _from_client_store(juju_data: str | Path | None) -> dict[str, Any]:
    """Read the current controller's details from the Juju client store."""
    root = Path(juju_data or os.environ.get(ENV_JUJU_DATA) or DEFAULT_JUJU_DATA).expanduser()
    controllers = _read_yaml(root / "controllers.yaml")
    accounts = _read_yaml(root / "accounts.yaml")

    current = controllers.get("current-controller")
    if not current:
        return {}

    logger.debug("Using controller %s from client store %s", current, root)
    values: dict[str, Any] = {}

    controller = (controllers.get("controllers") or {}).get(current) or {}
    if controller.get("api-endpoints"):
        values["controller_addresses"] = list(controller["api-endpoints"])
    if controller.get("ca-cert"):
        values["ca_certificate"] = controller["ca-cert"]

    account = (accounts.get("controllers") or {}).get(current) or {}
    if account.get("user"):
        values["username"] = account["user"]
    if account.get("password"):
        values["password"] = account["password"]

    return values


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse {path}: {e}") from e
    return data if isinstance(data, dict) else {}
