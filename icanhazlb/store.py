"""Submission of provisioning documents to the Kubernetes API server."""

from typing import Any, Dict, Optional, Protocol

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as TransportError

from .document import render_manifest
from .errors import SubmissionFailed
from .logging_config import get_logger, log_function_entry, log_function_exit, log_k8s_operation
from .models import ProvisionerConfig, ProvisioningDocument

logger = get_logger(__name__)


class ResourceStore(Protocol):
    """Anything that can persist a provisioning document."""

    def submit(self, document: ProvisioningDocument) -> Dict[str, Any]:
        """Create the resource and return the stored object.

        Raises:
            SubmissionFailed: if the document could not be created.
        """
        ...


class KubernetesResourceStore:
    """Creates ``IcanhazlbService`` objects through the custom objects API.

    One store, and one underlying ``ApiClient``, is shared by every request.
    Submission is a blind create: a second request for the same address is
    rejected by the API server with 409 Conflict and surfaces as
    :class:`SubmissionFailed`.
    """

    def __init__(self, provisioner_config: ProvisionerConfig):
        self.config = provisioner_config
        self._k8s_client: Optional[client.ApiClient] = None
        self._custom_objects: Optional[client.CustomObjectsApi] = None

    def connect(self) -> None:
        """Load credentials and build the API client."""
        log_function_entry(logger, "connect")
        log_k8s_operation(logger, "connect",
                          kubeconfig_path=self.config.kubeconfig_path,
                          context=self.config.context)

        try:
            if self.config.kubeconfig_path:
                logger.debug("Loading kubeconfig from file",
                             kubeconfig_path=self.config.kubeconfig_path,
                             context=self.config.context)
                config.load_kube_config(
                    config_file=self.config.kubeconfig_path,
                    context=self.config.context
                )
            else:
                logger.debug("Loading in-cluster config")
                config.load_incluster_config()

            # one connection attempt per submission; urllib3 otherwise retries 3 times
            configuration = client.Configuration.get_default_copy()
            configuration.retries = 0

            self._k8s_client = client.ApiClient(configuration)
            self._custom_objects = client.CustomObjectsApi(self._k8s_client)
            logger.info("Connected to Kubernetes API server")
            log_function_exit(logger, "connect", status="success")

        except Exception as e:
            logger.error("Failed to connect to Kubernetes API server",
                         error=str(e),
                         kubeconfig_path=self.config.kubeconfig_path,
                         context=self.config.context)
            log_function_exit(logger, "connect", status="error", error=str(e))
            raise

    def submit(self, document: ProvisioningDocument) -> Dict[str, Any]:
        """POST the document to its namespaced custom resource collection."""
        if self._custom_objects is None:
            logger.debug("API client not initialized, connecting")
            self.connect()

        body = render_manifest(document)
        log_k8s_operation(logger, "create",
                          group=document.api_group,
                          version=document.version,
                          namespace=document.namespace,
                          plural=document.plural,
                          name=document.name)

        kwargs = {}
        if self.config.request_timeout is not None:
            kwargs["_request_timeout"] = self.config.request_timeout

        try:
            created = self._custom_objects.create_namespaced_custom_object(
                group=document.api_group,
                version=document.version,
                namespace=document.namespace,
                plural=document.plural,
                body=body,
                **kwargs
            )
        except ApiException as e:
            logger.error("API server rejected resource",
                         name=document.name,
                         status=e.status,
                         reason=e.reason)
            raise SubmissionFailed(
                f"failed to create {document.kind} {document.name}: {e.status} {e.reason}",
                document.name,
                status=e.status,
            ) from e
        except TransportError as e:
            logger.error("Could not reach API server", name=document.name, error=str(e))
            raise SubmissionFailed(
                f"failed to create {document.kind} {document.name}: {e}", document.name
            ) from e

        managed_fields = (created or {}).get("metadata", {}).get("managedFields") or []
        if not managed_fields:
            logger.debug("Created resource carries no managedFields", name=document.name)

        logger.info("Created resource", kind=document.kind, name=document.name, namespace=document.namespace)
        return created

    def close(self) -> None:
        """Release the underlying API client."""
        if self._k8s_client:
            self._k8s_client.close()
            self._k8s_client = None
            self._custom_objects = None
