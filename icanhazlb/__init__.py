"""icanhazlb: provision load balancer resources from IP-bearing hostnames."""

__version__ = "0.1.0"

# Lazy imports keep the kubernetes client out of lightweight CLI commands
__all__ = [
    "Provisioner",
    "KubernetesResourceStore",
    "ProvisioningDocument",
    "ResolvedTarget",
    "parse_ip_address",
]


def __getattr__(name):
    if name == "Provisioner":
        from .provisioner import Provisioner
        return Provisioner
    elif name == "KubernetesResourceStore":
        from .store import KubernetesResourceStore
        return KubernetesResourceStore
    elif name == "ProvisioningDocument":
        from .models import ProvisioningDocument
        return ProvisioningDocument
    elif name == "ResolvedTarget":
        from .models import ResolvedTarget
        return ResolvedTarget
    elif name == "parse_ip_address":
        from .resolver import parse_ip_address
        return parse_ip_address
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
