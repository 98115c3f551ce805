"""
Shared fixtures: an in-memory controller standing in for the websocket API.
"""

import copy

import pytest

from jujuform.client import Client
from jujuform.config import ProviderConfig
from jujuform.errors import APIError
from jujuform.resources import resource_cloud


class FakeController:
    """Implements the Cloud facade requests the provider uses."""

    def __init__(self, default_cloud: str = "localhost"):
        self.clouds: dict[str, dict] = {
            default_cloud: {"type": "lxd", "auth-types": ["certificate"],
                            "regions": [{"name": "localhost"}]},
        }
        self.default_cloud = default_cloud
        self.requests: list[tuple[str, str, dict]] = []

    def rpc(self, facade, version, request, params=None):
        params = params or {}
        self.requests.append((facade, request, copy.deepcopy(params)))
        handler = getattr(self, f"_{facade}_{request}")
        return handler(params)

    def requests_named(self, request: str) -> list[dict]:
        return [p for _, r, p in self.requests if r == request]

    def _Cloud_Cloud(self, params):
        results = []
        for entity in params["entities"]:
            name = entity["tag"].removeprefix("cloud-")
            if name in self.clouds:
                results.append({"cloud": copy.deepcopy(self.clouds[name])})
            else:
                results.append({"error": _not_found(name)})
        return {"results": results}

    def _Cloud_AddCloud(self, params):
        name = params["name"]
        if name in self.clouds:
            raise APIError(f'cloud "{name}" already exists', "already exists")
        cloud = copy.deepcopy(params["cloud"])
        # The controller gives region-less clouds a "default" region
        if not cloud.get("regions"):
            cloud["regions"] = [{"name": "default"}]
        self.clouds[name] = cloud
        return {}

    def _Cloud_UpdateCloud(self, params):
        results = []
        for arg in params["clouds"]:
            if arg["name"] in self.clouds:
                self.clouds[arg["name"]] = copy.deepcopy(arg["cloud"])
                results.append({})
            else:
                results.append({"error": _not_found(arg["name"])})
        return {"results": results}

    def _Cloud_RemoveClouds(self, params):
        results = []
        for entity in params["entities"]:
            name = entity["tag"].removeprefix("cloud-")
            if name in self.clouds:
                del self.clouds[name]
                results.append({})
            else:
                results.append({"error": _not_found(name)})
        return {"results": results}

    def _Cloud_DefaultCloud(self, params):
        return {"result": f"cloud-{self.default_cloud}"}


def _not_found(name: str) -> dict:
    return {"message": f'cloud "{name}" not found', "code": "not found"}


class FakeConnection:
    def __init__(self, controller: FakeController, factory: "FakeConnectionFactory"):
        self.controller = controller
        self.factory = factory
        self.closed = False

    def rpc(self, facade, version, request, params=None):
        assert not self.closed, "rpc on a closed connection"
        return self.controller.rpc(facade, version, request, params)

    def close(self):
        self.closed = True
        self.factory.closed += 1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class FakeConnectionFactory:
    def __init__(self, controller: FakeController):
        self.controller = controller
        self.opened = 0
        self.closed = 0

    def get_connection(self):
        self.opened += 1
        return FakeConnection(self.controller, self)


@pytest.fixture
def provider_config():
    return ProviderConfig(
        controller_addresses=["10.0.0.10:17070"],
        username="admin",
        password="s3cret",
    )


@pytest.fixture
def controller():
    return FakeController()


@pytest.fixture
def connection_factory(controller):
    return FakeConnectionFactory(controller)


@pytest.fixture
def client(provider_config, connection_factory):
    return Client(provider_config, connection_factory=connection_factory)


@pytest.fixture
def cloud_resource():
    return resource_cloud()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real JUJU_* settings and client stores out of tests."""
    for var in (
        "JUJU_CONTROLLER_ADDRESSES",
        "JUJU_USERNAME",
        "JUJU_PASSWORD",
        "JUJU_CA_CERT",
        "JUJUFORM_LOG_LEVEL",
        "TF_LOG",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("JUJU_DATA", str(tmp_path / "juju-data"))
