"""
Wire models for the controller's Cloud facade.

Field names follow the controller's hyphenated JSON names through
aliases; Python code uses the snake_case attribute names.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator


class WireModel(BaseModel):
    """Base for API payloads: accepts both alias and field names, drops nulls."""

    class Config:
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with hyphenated keys and empty optionals omitted."""
        data = self.model_dump(by_alias=True)
        return {k: v for k, v in data.items() if not _is_empty(v)}


class CloudRegion(WireModel):
    """A region and its endpoints within a cloud."""

    name: str
    endpoint: str = ""
    identity_endpoint: str = Field(default="", alias="identity-endpoint")
    storage_endpoint: str = Field(default="", alias="storage-endpoint")


class CloudParams(WireModel):
    """
    Cloud definition as submitted to AddCloud/UpdateCloud.

    Example:
        params = CloudParams(
            type="lxd",
            auth_types=["certificate"],
            endpoint="https://10.0.0.1:8443",
            regions=[CloudRegion(name="default")],
        )
    """

    type: str
    host_cloud_region: str = Field(default="", alias="host-cloud-region")
    auth_types: list[str] = Field(default_factory=list, alias="auth-types")
    endpoint: str = ""
    identity_endpoint: str = Field(default="", alias="identity-endpoint")
    storage_endpoint: str = Field(default="", alias="storage-endpoint")
    regions: list[CloudRegion] = Field(default_factory=list)
    ca_certificates: list[str] = Field(default_factory=list, alias="ca-certificates")
    skip_tls_verify: bool = Field(default=False, alias="skip-tls-verify")
    config: dict[str, Any] = Field(default_factory=dict)
    region_config: dict[str, dict[str, Any]] = Field(
        default_factory=dict, alias="region-config"
    )

    def to_wire(self) -> dict[str, Any]:
        data = super().to_wire()
        if self.regions:
            data["regions"] = [r.to_wire() for r in self.regions]
        data["type"] = self.type
        data["auth-types"] = list(self.auth_types)
        data["skip-tls-verify"] = self.skip_tls_verify
        return data


class Cloud(CloudParams):
    """A cloud as registered on the controller."""

    name: str


def _is_empty(value: Any) -> bool:
    return value is None or (not isinstance(value, bool) and not value)


def cloud_from_params(name: str, params: CloudParams) -> Cloud:
    """Attach a name to a cloud definition."""
    return Cloud(name=name, **params.model_dump())


def cloud_tag(name: str) -> str:
    return f"cloud-{name}"


def name_from_tag(tag: str, kind: str = "cloud") -> str:
    """Strip the kind prefix from an entity tag, e.g. "cloud-lxd" -> "lxd"."""
    prefix = f"{kind}-"
    if not tag.startswith(prefix):
        raise ValueError(f"{tag!r} is not a valid {kind} tag")
    return tag[len(prefix):]
