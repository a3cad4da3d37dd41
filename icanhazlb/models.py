"""Data models for icanhazlb provisioning.

The resource models mirror the ``IcanhazlbService`` CRD schema consumed by the
downstream controller, so field aliases are the camelCase wire names and
documents must be dumped with ``by_alias=True``.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INGRESS_CLASS = "nginx"
DEFAULT_UPSTREAM_VHOST = "retro.adrenlinerush.net"


class WireModel(BaseModel):
    """Base for models that serialize to Kubernetes camelCase field names."""

    model_config = ConfigDict(populate_by_name=True)


class ProvisionerConfig(BaseModel):
    """Configuration for the provisioning service."""

    kubeconfig_path: Optional[str] = Field(None, description="Path to kubeconfig file; in-cluster config when unset")
    context: Optional[str] = Field(None, description="Kubernetes context name")
    ingress_class_name: str = Field(DEFAULT_INGRESS_CLASS, description="Ingress class set on generated ingresses")
    upstream_vhost: str = Field(DEFAULT_UPSTREAM_VHOST, description="Upstream vhost annotation value for the reverse proxy")
    request_timeout: Optional[float] = Field(None, gt=0, description="Submission timeout in seconds (transport default when unset)")


class ResolvedTarget(WireModel):
    """A hostname and the IPv4 address derived from it."""

    ip_address: str = Field(..., alias="ipAddress", description="Canonical dotted-decimal IPv4 address")
    hostname: str = Field(..., description="Requested hostname, port stripped")


class PortSpec(WireModel):
    name: str
    port: int


class EndpointSpec(WireModel):
    addresses: List[str] = Field(default_factory=list)


class EndpointSliceSpec(WireModel):
    name: str
    address_type: str = Field(..., alias="addressType")
    ports: List[PortSpec] = Field(default_factory=list)
    endpoints: List[EndpointSpec] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)


class ServiceSpec(WireModel):
    name: str
    type: str
    ip_families: List[str] = Field(default_factory=list, alias="ipFamilies")
    ports: List[PortSpec] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)


class BackendPort(WireModel):
    number: int


class ServiceBackend(WireModel):
    name: str
    port: BackendPort


class IngressBackend(WireModel):
    service: ServiceBackend


class IngressPath(WireModel):
    path: str
    path_type: str = Field(..., alias="pathType")
    backend: IngressBackend


class HTTPIngressRuleValue(WireModel):
    paths: List[IngressPath] = Field(default_factory=list)


class IngressRule(WireModel):
    host: str
    http: HTTPIngressRuleValue


class IngressSpec(WireModel):
    name: str
    annotations: Dict[str, str] = Field(default_factory=dict)
    ingress_class_name: str = Field(..., alias="ingressClassName")
    rules: List[IngressRule] = Field(default_factory=list)


class IcanhazlbServiceSpec(WireModel):
    endpoint_slices: EndpointSliceSpec = Field(..., alias="endpointSlices")
    services: ServiceSpec
    ingresses: IngressSpec


class ObjectMeta(WireModel):
    name: str
    namespace: str


class ProvisioningDocument(WireModel):
    """An ``IcanhazlbService`` custom resource ready for submission."""

    api_version: str = Field(..., alias="apiVersion", description="<group>/<version>")
    kind: str
    metadata: ObjectMeta
    spec: IcanhazlbServiceSpec
    plural: str = Field(..., exclude=True, description="Plural resource name used in the collection path")

    @property
    def api_group(self) -> str:
        return self.api_version.split("/", 1)[0]

    @property
    def version(self) -> str:
        return self.api_version.split("/", 1)[-1]

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace
