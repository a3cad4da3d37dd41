"""Tests for the Provisioner."""

import pytest

from icanhazlb.errors import AddressInvalid, AddressNotFound, SubmissionFailed
from icanhazlb.models import ProvisionerConfig
from icanhazlb.provisioner import Provisioner


class TestProvisioner:
    """Tests for Provisioner.provision and Provisioner.render."""

    def test_provision_submits_document(self, fake_store):
        provisioner = Provisioner(fake_store)

        target = provisioner.provision("203-0-113-5.lb.example.com")

        assert target.ip_address == "203.0.113.5"
        assert target.hostname == "203-0-113-5.lb.example.com"
        assert list(fake_store.objects) == ["icanhazlb-203-0-113-5"]
        document = fake_store.submitted[0]
        assert document.spec.endpoint_slices.endpoints[0].addresses == ["203.0.113.5"]

    def test_default_config(self, fake_store):
        assert Provisioner(fake_store).config == ProvisionerConfig()

    def test_config_applied_to_document(self, fake_store):
        config = ProvisionerConfig(ingress_class_name="traefik", upstream_vhost="app.example.com")
        provisioner = Provisioner(fake_store, config)

        provisioner.provision("10-0-0-1.example.com")

        ingress = fake_store.submitted[0].spec.ingresses
        assert ingress.ingress_class_name == "traefik"
        assert ingress.annotations == {"nginx.ingress.kubernetes.io/upstream-vhost": "app.example.com"}

    def test_invalid_address_not_submitted(self, fake_store):
        provisioner = Provisioner(fake_store)

        with pytest.raises(AddressInvalid):
            provisioner.provision("999-1-1-1.example.com")

        assert fake_store.submitted == []

    def test_missing_address_not_submitted(self, fake_store):
        provisioner = Provisioner(fake_store)

        with pytest.raises(AddressNotFound):
            provisioner.provision("foo.example.com")

        assert fake_store.submitted == []

    def test_repeated_address_conflicts(self, fake_store):
        """Submission is a blind create, so the second request is rejected."""
        provisioner = Provisioner(fake_store)
        provisioner.provision("203-0-113-5.lb.example.com")

        with pytest.raises(SubmissionFailed) as exc_info:
            provisioner.provision("203.0.113.5.other.example.com")

        assert exc_info.value.status == 409
        assert len(fake_store.submitted) == 2

    def test_store_failure_propagates(self, unreachable_store):
        provisioner = Provisioner(unreachable_store)

        with pytest.raises(SubmissionFailed, match="connection refused"):
            provisioner.provision("203-0-113-5.lb.example.com")

        assert unreachable_store.attempts == 1

    def test_render_does_not_submit(self, fake_store):
        provisioner = Provisioner(fake_store)

        manifest = provisioner.render("10_0_0_1.example.com")

        assert manifest["metadata"]["name"] == "icanhazlb-10-0-0-1"
        assert manifest["spec"]["ingresses"]["rules"][0]["host"] == "10-0-0-1.example.com"
        assert fake_store.submitted == []

    def test_build_resolves_hostname(self, fake_store):
        document = Provisioner(fake_store).build("ip-192-168-1-10.internal")

        assert document.name == "icanhazlb-192-168-1-10"
