"""
Tests for the juju_cloud resource: schema, field mapping and handlers.
"""

import pytest

from jujuform.client import CloudRegion
from jujuform.errors import ResourceIdError
from jujuform.resources.cloud import (
    UPDATABLE_ATTRIBUTES,
    parse_cloud_id,
    parse_region_config,
    parse_regions,
    prepare_cloud_input,
)
from jujuform.schema import ValueType


BASIC_PLAN = {
    "name": "remote-lxd",
    "type": "lxd",
    "endpoint": "https://lxd.internal:8443",
    "auth_types": ["certificate"],
}


UPDATE_CASES = [
    ("host_cloud_region", "lxd/default", "host-cloud-region", "lxd/default"),
    ("auth_types", ["certificate", "interactive"], "auth-types", ["certificate", "interactive"]),
    ("endpoint", "https://my.new.endpoint", "endpoint", "https://my.new.endpoint"),
    ("identity_endpoint", "https://keystone.internal", "identity-endpoint", "https://keystone.internal"),
    ("storage_endpoint", "https://swift.internal", "storage-endpoint", "https://swift.internal"),
    ("config", {"project": "infra"}, "config", {"project": "infra"}),
    ("ca_certificates", ["-----BEGIN CERTIFICATE-----"], "ca-certificates", ["-----BEGIN CERTIFICATE-----"]),
    ("skip_tls_verify", True, "skip-tls-verify", True),
    (
        "regions",
        [{"name": "east", "endpoint": "https://east.internal"}],
        "regions",
        [{"name": "east", "endpoint": "https://east.internal"}],
    ),
    (
        "region_config",
        [{"name": "default", "config": {"profile": "fast"}}],
        "region-config",
        {"default": {"profile": "fast"}},
    ),
]


class TestCloudSchema:
    """Tests for the juju_cloud attribute definitions."""

    def test_name_and_type_force_new(self, cloud_resource):
        """Test name and type cannot be changed in place."""
        assert cloud_resource.schema["name"].force_new
        assert cloud_resource.schema["type"].force_new
        assert not cloud_resource.schema["endpoint"].force_new

    def test_required_attributes(self, cloud_resource):
        """Test which attributes must be configured."""
        required = sorted(k for k, s in cloud_resource.schema.items() if s.required)

        assert required == ["auth_types", "name", "type"]

    def test_regions_is_computed_set(self, cloud_resource):
        """Test regions keep controller-provided values."""
        regions = cloud_resource.schema["regions"]

        assert regions.type == ValueType.SET
        assert regions.optional and regions.computed
        assert set(regions.elem.schema) == {
            "name", "endpoint", "identity_endpoint", "storage_endpoint"
        }

    def test_updatable_attributes_exist(self, cloud_resource):
        """Test every tracked attribute is part of the schema."""
        for key in UPDATABLE_ATTRIBUTES:
            assert key in cloud_resource.schema

    def test_skip_tls_verify_defaults_false(self, cloud_resource):
        """Test TLS verification is on unless asked otherwise."""
        d = cloud_resource.data(plan=BASIC_PLAN)

        assert d.get("skip_tls_verify") is False


class TestParseCloudId:
    """Tests for resource id parsing."""

    def test_valid_id(self):
        """Test the cloud name is extracted from the id."""
        assert parse_cloud_id("cloud:remote-lxd") == "remote-lxd"

    @pytest.mark.parametrize("bad_id", ["", "remote-lxd", "model:remote", "cloud:"])
    def test_invalid_id(self, bad_id):
        """Test malformed ids are rejected."""
        with pytest.raises(ResourceIdError):
            parse_cloud_id(bad_id)


class TestFieldMapping:
    """Tests for the API <-> attribute mapping helpers."""

    def test_parse_regions_omits_empty_endpoints(self):
        """Test only non-empty endpoints appear in region blocks."""
        regions = parse_regions([
            CloudRegion(name="r1", endpoint="https://r1"),
            CloudRegion(name="r2", identity_endpoint="https://id", storage_endpoint="https://st"),
        ])

        assert regions == [
            {"name": "r1", "endpoint": "https://r1"},
            {"name": "r2", "identity_endpoint": "https://id", "storage_endpoint": "https://st"},
        ]

    def test_parse_regions_empty(self):
        """Test no regions map to an empty list."""
        assert parse_regions([]) == []

    def test_parse_region_config_sorted(self):
        """Test region config blocks are ordered by region."""
        blocks = parse_region_config({
            "west": {"network": "w"},
            "east": {"network": "e"},
        })

        assert blocks == [
            {"name": "east", "config": {"network": "e"}},
            {"name": "west", "config": {"network": "w"}},
        ]

    def test_prepare_basic_input(self, cloud_resource):
        """Test a minimal plan maps onto the request."""
        d = cloud_resource.data(plan=BASIC_PLAN)

        params = prepare_cloud_input(d)

        assert params.to_wire() == {
            "type": "lxd",
            "endpoint": "https://lxd.internal:8443",
            "auth-types": ["certificate"],
            "skip-tls-verify": False,
        }

    def test_prepare_full_input(self, cloud_resource):
        """Test every region endpoint and region config is submitted."""
        d = cloud_resource.data(plan={
            **BASIC_PLAN,
            "type": "openstack",
            "host_cloud_region": "openstack/RegionOne",
            "identity_endpoint": "https://keystone:5000/v3",
            "regions": [
                {
                    "name": "RegionOne",
                    "endpoint": "https://r1",
                    "identity_endpoint": "https://r1-id",
                    "storage_endpoint": "https://r1-st",
                },
                {"name": "RegionTwo"},
            ],
            "region_config": [
                {"name": "RegionOne", "config": {"network": "r1-net"}},
            ],
            "config": {"use-floating-ip": "true"},
            "ca_certificates": ["PEM-1", "PEM-2"],
            "skip_tls_verify": True,
        })

        params = prepare_cloud_input(d)

        assert params.host_cloud_region == "openstack/RegionOne"
        assert sorted(params.regions, key=lambda r: r.name) == [
            CloudRegion(
                name="RegionOne",
                endpoint="https://r1",
                identity_endpoint="https://r1-id",
                storage_endpoint="https://r1-st",
            ),
            CloudRegion(name="RegionTwo"),
        ]
        assert params.region_config == {"RegionOne": {"network": "r1-net"}}
        assert params.config == {"use-floating-ip": "true"}
        assert params.ca_certificates == ["PEM-1", "PEM-2"]
        assert params.skip_tls_verify is True


class TestCloudHandlers:
    """Tests for the lifecycle handlers against the fake controller."""

    def test_create_sets_id_and_reads_back(self, cloud_resource, client, controller):
        """Test create registers the cloud and refreshes state."""
        d = cloud_resource.data(plan=BASIC_PLAN)

        diags = cloud_resource.create(d, client)

        assert diags == []
        assert d.id() == "cloud:remote-lxd"
        assert "remote-lxd" in controller.clouds
        assert d.get("regions") == [
            {"name": "default", "endpoint": "", "identity_endpoint": "", "storage_endpoint": ""}
        ]
        assert d.get("is_controller_cloud") is False

    def test_create_error_surfaced(self, cloud_resource, client):
        """Test API errors become error diagnostics with the message unchanged."""
        d = cloud_resource.data(plan={**BASIC_PLAN, "name": "localhost"})

        diags = cloud_resource.create(d, client)

        assert diags.has_error()
        assert diags[0].summary == 'cloud "localhost" already exists'
        assert d.id() == ""

    def test_read_controller_cloud(self, cloud_resource, client):
        """Test the controller's own cloud is flagged."""
        d = cloud_resource.data(id="cloud:localhost")

        diags = cloud_resource.read(d, client)

        assert diags == []
        assert d.get("name") == "localhost"
        assert d.get("is_controller_cloud") is True

    def test_read_flattens_everything(self, cloud_resource, client, controller):
        """Test every API field lands in its attribute."""
        controller.clouds["os"] = {
            "type": "openstack",
            "host-cloud-region": "openstack/RegionOne",
            "auth-types": ["userpass", "access-key"],
            "endpoint": "https://keystone:5000/v3",
            "identity-endpoint": "https://id",
            "storage-endpoint": "https://st",
            "regions": [{"name": "RegionOne", "endpoint": "https://r1"}],
            "ca-certificates": ["PEM"],
            "skip-tls-verify": True,
            "config": {"use-floating-ip": True, "network": "net"},
            "region-config": {"RegionOne": {"network": "r1"}},
        }
        d = cloud_resource.data(id="cloud:os")

        diags = cloud_resource.read(d, client)

        assert diags == []
        state = d.state()
        assert state["type"] == "openstack"
        assert state["host_cloud_region"] == "openstack/RegionOne"
        assert state["auth_types"] == ["userpass", "access-key"]
        assert state["identity_endpoint"] == "https://id"
        assert state["storage_endpoint"] == "https://st"
        assert state["ca_certificates"] == ["PEM"]
        assert state["skip_tls_verify"] is True
        assert state["config"] == {"use-floating-ip": "true", "network": "net"}
        assert state["regions"] == [{
            "name": "RegionOne",
            "endpoint": "https://r1",
            "identity_endpoint": "",
            "storage_endpoint": "",
        }]
        assert state["region_config"] == [{"name": "RegionOne", "config": {"network": "r1"}}]

    def test_read_missing_cloud(self, cloud_resource, client):
        """Test reading a removed cloud reports the API error."""
        d = cloud_resource.data(id="cloud:ghost")

        diags = cloud_resource.read(d, client)

        assert diags.has_error()
        assert diags[0].summary == 'cloud "ghost" not found'

    def test_read_malformed_id(self, cloud_resource, client, connection_factory):
        """Test a malformed id fails before any API call."""
        d = cloud_resource.data(id="remote-lxd")

        diags = cloud_resource.read(d, client)

        assert diags.has_error()
        assert connection_factory.opened == 0

    def test_read_type_mismatch_surfaced(self, cloud_resource, client, controller):
        """Test values that do not fit the schema become error diagnostics."""
        controller.clouds["odd"] = {
            "type": "lxd",
            "auth-types": ["certificate"],
            "config": {"nested": {"not": "allowed"}},
        }
        d = cloud_resource.data(id="cloud:odd")

        diags = cloud_resource.read(d, client)

        assert diags.has_error()
        assert "config" in diags[0].summary

    def test_update_without_changes_is_noop(self, cloud_resource, client, controller):
        """Test no API call is made when nothing tracked changed."""
        d = cloud_resource.data(plan=BASIC_PLAN)
        cloud_resource.create(d, client)
        state = d.state()

        d = cloud_resource.data(state=state, plan=BASIC_PLAN)
        diags = cloud_resource.update(d, client)

        assert diags == []
        assert controller.requests_named("UpdateCloud") == []

    def test_update_endpoint(self, cloud_resource, client, controller):
        """Test a changed endpoint re-submits the whole cloud."""
        d = cloud_resource.data(plan=BASIC_PLAN)
        cloud_resource.create(d, client)

        plan = {**BASIC_PLAN, "endpoint": "https://my.new.endpoint"}
        d = cloud_resource.data(state=d.state(), plan=plan)
        diags = cloud_resource.update(d, client)

        assert diags == []
        request = controller.requests_named("UpdateCloud")[0]
        assert request["clouds"][0]["name"] == "remote-lxd"
        submitted = request["clouds"][0]["cloud"]
        assert submitted["endpoint"] == "https://my.new.endpoint"
        assert submitted["type"] == "lxd"
        assert submitted["auth-types"] == ["certificate"]
        # Computed regions from state are submitted too
        assert submitted["regions"] == [{"name": "default"}]

    def test_update_cases_cover_tracked_attributes(self):
        """Test every tracked attribute has an update case below."""
        assert sorted(case[0] for case in UPDATE_CASES) == sorted(UPDATABLE_ATTRIBUTES)

    @pytest.mark.parametrize("attribute,value,wire_key,wire_value", UPDATE_CASES)
    def test_update_tracked_attribute(
        self, cloud_resource, client, controller, attribute, value, wire_key, wire_value
    ):
        """Test changing any tracked attribute sends exactly one UpdateCloud."""
        d = cloud_resource.data(plan=BASIC_PLAN)
        cloud_resource.create(d, client)

        plan = {**BASIC_PLAN, attribute: value}
        d = cloud_resource.data(state=d.state(), plan=plan)
        assert d.has_change(attribute)

        diags = cloud_resource.update(d, client)

        assert diags == []
        requests = controller.requests_named("UpdateCloud")
        assert len(requests) == 1
        submitted = requests[0]["clouds"][0]["cloud"]
        assert submitted[wire_key] == wire_value
        assert controller.clouds["remote-lxd"][wire_key] == wire_value

    def test_update_force_new_rejected(self, cloud_resource, client, controller):
        """Test renaming is refused instead of updating the wrong cloud."""
        d = cloud_resource.data(plan=BASIC_PLAN)
        cloud_resource.create(d, client)

        d = cloud_resource.data(state=d.state(), plan={**BASIC_PLAN, "name": "renamed"})
        diags = cloud_resource.update(d, client)

        assert diags.has_error()
        assert "name" in diags[0].summary
        assert controller.requests_named("UpdateCloud") == []

    def test_update_error_surfaced(self, cloud_resource, client, controller):
        """Test UpdateCloud errors are reported."""
        d = cloud_resource.data(plan=BASIC_PLAN)
        cloud_resource.create(d, client)
        state = d.state()
        del controller.clouds["remote-lxd"]

        d = cloud_resource.data(state=state, plan={**BASIC_PLAN, "endpoint": "https://x"})
        diags = cloud_resource.update(d, client)

        assert diags.has_error()
        assert diags[0].summary == 'cloud "remote-lxd" not found'

    def test_delete(self, cloud_resource, client, controller):
        """Test delete removes the cloud by name and clears the id."""
        d = cloud_resource.data(plan=BASIC_PLAN)
        cloud_resource.create(d, client)

        d = cloud_resource.data(state=d.state())
        diags = cloud_resource.delete(d, client)

        assert diags == []
        assert d.id() == ""
        assert "remote-lxd" not in controller.clouds

    def test_delete_error_keeps_id(self, cloud_resource, client):
        """Test a failed delete leaves the resource in state."""
        d = cloud_resource.data(state={"id": "cloud:ghost", "name": "ghost"})

        diags = cloud_resource.delete(d, client)

        assert diags.has_error()
        assert d.id() == "cloud:ghost"

    def test_import(self, cloud_resource, client):
        """Test import keeps the id and fills state from the controller."""
        imported, diags = cloud_resource.import_state("cloud:localhost", client)

        assert diags == []
        assert len(imported) == 1
        assert imported[0].id() == "cloud:localhost"
        assert imported[0].get("type") == "lxd"
        assert imported[0].get("auth_types") == ["certificate"]
