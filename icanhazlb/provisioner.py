"""Request-scoped provisioning: resolve a hostname, build and submit its resource."""

from typing import Any, Dict, Optional

from .document import build_document, render_manifest
from .logging_config import get_logger, log_function_entry, log_function_exit, log_provision_event
from .models import ProvisionerConfig, ProvisioningDocument, ResolvedTarget
from .resolver import resolve_target
from .store import ResourceStore

logger = get_logger(__name__)


class Provisioner:
    """Turns a requested hostname into an ``IcanhazlbService`` resource.

    Holds no per-request state; a single instance serves concurrent requests
    and shares its store between them.
    """

    def __init__(self, store: ResourceStore, config: Optional[ProvisionerConfig] = None):
        self.store = store
        self.config = config or ProvisionerConfig()

    def build(self, hostname: str) -> ProvisioningDocument:
        """Resolve ``hostname`` and build its document without submitting it.

        Raises:
            AddressNotFound: no address pattern in the hostname.
            AddressInvalid: the embedded address is not valid IPv4.
        """
        return self._document_for(resolve_target(hostname))

    def _document_for(self, target: ResolvedTarget) -> ProvisioningDocument:
        return build_document(
            target,
            ingress_class_name=self.config.ingress_class_name,
            upstream_vhost=self.config.upstream_vhost,
        )

    def render(self, hostname: str) -> Dict[str, Any]:
        return render_manifest(self.build(hostname))

    def provision(self, hostname: str) -> ResolvedTarget:
        """Resolve ``hostname`` and create its resource.

        Address errors propagate before anything is submitted. Store errors
        propagate as :class:`~icanhazlb.errors.SubmissionFailed`; nothing is
        retried.
        """
        log_function_entry(logger, "provision", hostname=hostname)

        target = resolve_target(hostname)
        log_provision_event(logger, "address_resolved", hostname=hostname, ip_address=target.ip_address)

        document = self._document_for(target)
        self.store.submit(document)
        log_provision_event(logger, "resource_submitted",
                            hostname=hostname,
                            ip_address=target.ip_address,
                            resource_name=document.name)

        log_function_exit(logger, "provision", resource_name=document.name)
        return target
