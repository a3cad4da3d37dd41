"""Tests for the FastAPI provisioning endpoint."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from urllib3.exceptions import MaxRetryError

from icanhazlb.api import app, get_provisioner, initialize_provisioner
from icanhazlb.models import ProvisionerConfig
from icanhazlb.provisioner import Provisioner
from icanhazlb.store import KubernetesResourceStore


def make_client(hostname: str) -> TestClient:
    return TestClient(app, base_url=f"http://{hostname}")


class TestAPI:
    """Tests for the provisioning endpoint."""

    @pytest.fixture(autouse=True)
    def reset_provisioner(self):
        app.state.provisioner = None
        yield
        app.state.provisioner = None

    @pytest.fixture
    def provisioner(self, fake_store):
        provisioner = Provisioner(fake_store)
        initialize_provisioner(provisioner)
        return provisioner

    def test_health_check(self):
        response = make_client("localhost").get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "icanhazlb"}

    def test_initialize_provisioner(self, provisioner):
        request = MagicMock()
        request.app = app

        assert get_provisioner(request) is provisioner

    def test_not_initialized(self):
        response = make_client("203-0-113-5.lb.example.com").get("/")

        assert response.status_code == 503

    def test_provision_success(self, provisioner, fake_store):
        response = make_client("203-0-113-5.lb.example.com").get("/")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"ipAddress": "203.0.113.5", "hostname": "203-0-113-5.lb.example.com"}
        assert response.text == '{"ipAddress":"203.0.113.5","hostname":"203-0-113-5.lb.example.com"}'
        assert list(fake_store.objects) == ["icanhazlb-203-0-113-5"]

    def test_port_stripped_from_host(self, provisioner):
        response = make_client("10-0-0-1.example.com:8080").get("/")

        assert response.status_code == 200
        assert response.json() == {"ipAddress": "10.0.0.1", "hostname": "10-0-0-1.example.com"}

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE", "TRACE"])
    def test_method_agnostic(self, provisioner, fake_store, method):
        response = make_client("192-168-1-10.example.com").request(method, "/")

        assert response.status_code == 200
        assert response.json()["ipAddress"] == "192.168.1.10"
        assert len(fake_store.submitted) == 1

    @pytest.mark.parametrize("path", ["/some/path", "/index.html", "/a/b/c?x=1"])
    def test_any_path(self, provisioner, fake_store, path):
        response = make_client("203-0-113-5.lb.example.com").get(path)

        assert response.status_code == 200
        assert response.json() == {"ipAddress": "203.0.113.5", "hostname": "203-0-113-5.lb.example.com"}
        assert list(fake_store.objects) == ["icanhazlb-203-0-113-5"]

    def test_health_not_provisioned(self, provisioner, fake_store):
        response = make_client("203-0-113-5.lb.example.com").get("/health")

        assert response.json() == {"status": "healthy", "service": "icanhazlb"}
        assert fake_store.submitted == []

    def test_invalid_address(self, provisioner, fake_store):
        response = make_client("999-1-1-1.example.com").get("/")

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/plain")
        assert "999.1.1.1" in response.text
        assert fake_store.submitted == []

    def test_address_not_found(self, provisioner, fake_store):
        response = make_client("foo.example.com").get("/")

        assert response.status_code == 400
        assert "No IP address pattern" in response.text
        assert fake_store.submitted == []

    def test_repeated_address_is_server_error(self, provisioner):
        client = make_client("203-0-113-5.lb.example.com")

        assert client.get("/").status_code == 200
        response = client.get("/")

        assert response.status_code == 500
        assert response.text.startswith("Failed to create resource:")
        assert "409" in response.text

    def test_store_unreachable_keeps_serving(self, unreachable_store, fake_store):
        initialize_provisioner(Provisioner(unreachable_store))

        response = make_client("203-0-113-5.lb.example.com").get("/")

        assert response.status_code == 500
        assert "connection refused" in response.text

        initialize_provisioner(Provisioner(fake_store))
        response = make_client("203-0-113-5.lb.example.com").get("/")

        assert response.status_code == 200

    def test_transport_error_from_kubernetes_store(self):
        store = KubernetesResourceStore(ProvisionerConfig())
        store._custom_objects = MagicMock()
        store._custom_objects.create_namespaced_custom_object.side_effect = MaxRetryError(None, "/apis")
        initialize_provisioner(Provisioner(store))
        client = make_client("203-0-113-5.lb.example.com")

        first = client.get("/")
        second = client.get("/health")

        assert first.status_code == 500
        assert first.text.startswith("Failed to create resource:")
        assert second.status_code == 200

    def test_shutdown_closes_store(self, provisioner, fake_store):
        with make_client("localhost"):
            pass

        assert fake_store.closed is True
