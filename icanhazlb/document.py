"""Build ``IcanhazlbService`` documents from resolved targets."""

from typing import Any, Dict

from pydantic import ValidationError

from .errors import AddressInvalid, SubmissionFailed
from .logging_config import get_logger
from .models import (
    DEFAULT_INGRESS_CLASS,
    DEFAULT_UPSTREAM_VHOST,
    BackendPort,
    EndpointSliceSpec,
    EndpointSpec,
    HTTPIngressRuleValue,
    IcanhazlbServiceSpec,
    IngressBackend,
    IngressPath,
    IngressRule,
    IngressSpec,
    ObjectMeta,
    PortSpec,
    ProvisioningDocument,
    ResolvedTarget,
    ServiceBackend,
    ServiceSpec,
)

logger = get_logger(__name__)

API_GROUP = "service.icanhazlb.com"
API_VERSION = "v1alpha1"
KIND = "IcanhazlbService"
PLURAL = "icanhazlbservices"
NAMESPACE = "default"

NAME_PREFIX = "icanhazlb"
HTTP_PORT_NAME = "http"
HTTP_PORT = 80

SERVICE_NAME_LABEL = "kubernetes.io/service-name"
UPSTREAM_VHOST_ANNOTATION = "nginx.ingress.kubernetes.io/upstream-vhost"


def address_slug(ip_address: str) -> str:
    """``203.0.113.5`` -> ``203-0-113-5`` (valid in DNS-1123 names)."""
    return ip_address.replace(".", "-")


def resource_name(ip_address: str) -> str:
    return f"{NAME_PREFIX}-{address_slug(ip_address)}"


def service_name(ip_address: str) -> str:
    return f"{resource_name(ip_address)}-svc"


def ingress_name(ip_address: str) -> str:
    return f"{resource_name(ip_address)}-ing"


def ingress_host(hostname: str) -> str:
    """Ingress hosts must be DNS names, so underscores become dashes."""
    return hostname.replace("_", "-")


def build_document(
    target: ResolvedTarget,
    ingress_class_name: str = DEFAULT_INGRESS_CLASS,
    upstream_vhost: str = DEFAULT_UPSTREAM_VHOST,
) -> ProvisioningDocument:
    """Build the provisioning document for ``target``.

    Every name is derived from the resolved address, so the same address
    always yields the same resource, service and ingress names, and the
    ingress backend always points at the service declared alongside it.

    Raises:
        AddressInvalid: if the target carries no address.
    """
    if not target.ip_address:
        raise AddressInvalid(target.hostname, target.ip_address)

    svc_name = service_name(target.ip_address)
    http_port = PortSpec(name=HTTP_PORT_NAME, port=HTTP_PORT)

    endpoint_slices = EndpointSliceSpec(
        name=svc_name,
        address_type="IPv4",
        ports=[http_port],
        endpoints=[EndpointSpec(addresses=[target.ip_address])],
        labels={SERVICE_NAME_LABEL: svc_name},
    )

    services = ServiceSpec(
        name=svc_name,
        type="ClusterIP",
        ip_families=["IPv4"],
        ports=[http_port],
        labels={SERVICE_NAME_LABEL: svc_name},
    )

    ingresses = IngressSpec(
        name=ingress_name(target.ip_address),
        annotations={UPSTREAM_VHOST_ANNOTATION: upstream_vhost},
        ingress_class_name=ingress_class_name,
        rules=[
            IngressRule(
                host=ingress_host(target.hostname),
                http=HTTPIngressRuleValue(
                    paths=[
                        IngressPath(
                            path="/",
                            path_type="ImplementationSpecific",
                            backend=IngressBackend(
                                service=ServiceBackend(name=svc_name, port=BackendPort(number=HTTP_PORT)),
                            ),
                        )
                    ]
                ),
            )
        ],
    )

    document = ProvisioningDocument(
        api_version=f"{API_GROUP}/{API_VERSION}",
        kind=KIND,
        metadata=ObjectMeta(name=resource_name(target.ip_address), namespace=NAMESPACE),
        spec=IcanhazlbServiceSpec(endpoint_slices=endpoint_slices, services=services, ingresses=ingresses),
        plural=PLURAL,
    )
    logger.debug("Built provisioning document",
                 resource_name=document.name,
                 service_name=svc_name,
                 ip_address=target.ip_address)
    return document


def render_manifest(document: ProvisioningDocument) -> Dict[str, Any]:
    """Return the document as the JSON-compatible body sent to the API server."""
    try:
        return document.model_dump(mode="json", by_alias=True)
    except (ValidationError, ValueError, TypeError) as e:
        logger.error("Failed to render provisioning document", resource_name=document.name, error=str(e))
        raise SubmissionFailed(f"failed to marshal resource: {e}", document.name) from e

