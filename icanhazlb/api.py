"""FastAPI application serving the provisioning endpoint."""

import asyncio

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from .errors import AddressError, SubmissionFailed
from .logging_config import get_logger, log_api_request, log_api_response, log_function_entry, log_function_exit
from .provisioner import Provisioner
from .resolver import extract_hostname

logger = get_logger(__name__)

PROVISION_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE"]

app = FastAPI(
    title="icanhazlb",
    description="Provision load balancer resources from IP-bearing hostnames",
    version="0.1.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests and responses."""
    start_time = asyncio.get_event_loop().time()

    log_api_request(logger, request.method,
                    request.headers.get("host", ""),
                    str(request.url.path),
                    client_ip=request.client.host if request.client else "unknown",
                    user_agent=request.headers.get("user-agent", "unknown"))

    response = await call_next(request)

    duration = asyncio.get_event_loop().time() - start_time
    log_api_response(logger, request.method, str(request.url.path),
                     response.status_code,
                     duration_ms=round(duration * 1000, 2))

    return response


def initialize_provisioner(provisioner: Provisioner) -> None:
    """Attach the shared provisioner to the application."""
    log_function_entry(logger, "initialize_provisioner",
                       ingress_class_name=provisioner.config.ingress_class_name)
    app.state.provisioner = provisioner
    logger.info("Provisioner initialized",
                ingress_class_name=provisioner.config.ingress_class_name,
                upstream_vhost=provisioner.config.upstream_vhost)
    log_function_exit(logger, "initialize_provisioner", status="success")


def get_provisioner(request: Request) -> Provisioner:
    provisioner = getattr(request.app.state, "provisioner", None)
    if provisioner is None:
        raise HTTPException(status_code=503, detail="Provisioner not initialized")
    return provisioner


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "icanhazlb"}


# catch-all, must stay below /health
@app.api_route("/", methods=PROVISION_METHODS)
@app.api_route("/{path:path}", methods=PROVISION_METHODS)
def provision(request: Request, provisioner: Provisioner = Depends(get_provisioner)):
    """Provision a resource for the address embedded in the Host header.

    Runs in the worker thread pool since the Kubernetes client blocks.
    """
    hostname = extract_hostname(request.headers.get("host", ""))

    try:
        target = provisioner.provision(hostname)
    except AddressError as e:
        logger.warning("Rejected request without usable address", hostname=hostname, error=str(e))
        return PlainTextResponse(str(e), status_code=400)
    except SubmissionFailed as e:
        logger.error("Provisioning failed",
                     hostname=hostname,
                     resource_name=e.resource_name,
                     status=e.status,
                     error=str(e))
        return PlainTextResponse(f"Failed to create resource: {e}", status_code=500)

    return JSONResponse(content=target.model_dump(by_alias=True))


@app.on_event("shutdown")
async def shutdown_event():
    """Release the store's client on application shutdown."""
    logger.info("Shutting down icanhazlb API")
    provisioner = getattr(app.state, "provisioner", None)
    if provisioner is not None and hasattr(provisioner.store, "close"):
        provisioner.store.close()
