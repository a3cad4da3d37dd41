"""Command-line interface for icanhazlb."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .errors import AddressError, ConfigurationError
from .logging_config import setup_logging, get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATHS = [Path("icanhazlb.yaml"), Path("config.yaml"), Path("/etc/icanhazlb/config.yaml")]


def load_config(config_path: Optional[Path]):
    """Load a ProvisionerConfig from YAML, or defaults when no path is given.

    Raises:
        ConfigurationError: if the file cannot be read or fails validation.
    """
    import yaml
    from pydantic import ValidationError
    from .models import ProvisionerConfig

    if config_path is None:
        return ProvisionerConfig()

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}
        return ProvisionerConfig(**config_data)
    except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
        raise ConfigurationError(f"{config_path}: {e}") from e


def _find_config(explicit: Optional[str]) -> Optional[Path]:
    if explicit:
        return Path(explicit)
    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return path
    return None


def _resolve_config(args: argparse.Namespace):
    """Load the configuration selected by --config and apply flag overrides."""
    config_path = _find_config(getattr(args, "config", None))
    try:
        provisioner_config = load_config(config_path)
    except ConfigurationError as e:
        logger.error("Failed to load configuration", error=str(e))
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if config_path:
        logger.info("Configuration loaded", config_path=str(config_path))
    else:
        logger.debug("No configuration file found, using defaults")

    overrides = {}
    if getattr(args, "kubeconfig", None):
        overrides["kubeconfig_path"] = args.kubeconfig
    if getattr(args, "context", None):
        overrides["context"] = args.context
    if overrides:
        provisioner_config = provisioner_config.model_copy(update=overrides)
    return provisioner_config


def serve_command(args: argparse.Namespace) -> None:
    """Start the provisioning API server."""
    # Import heavy dependencies only when needed
    import uvicorn
    from .api import app, initialize_provisioner
    from .logging_config import log_function_entry, log_function_exit
    from .provisioner import Provisioner
    from .store import KubernetesResourceStore

    setup_logging(args.verbose)
    log_function_entry(logger, "serve_command", host=args.host, port=args.port, config=args.config)

    provisioner_config = _resolve_config(args)

    store = KubernetesResourceStore(provisioner_config)
    try:
        store.connect()
    except Exception as e:
        print(f"Failed to build Kubernetes configuration: {e}", file=sys.stderr)
        sys.exit(1)

    initialize_provisioner(Provisioner(store, provisioner_config))

    logger.info("Starting icanhazlb server", host=args.host, port=args.port)
    print(f"Starting icanhazlb server on {args.host}:{args.port}")

    log_function_exit(logger, "serve_command", status="starting_server")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="info" if not args.verbose else "debug"
    )


def resolve_command(args: argparse.Namespace) -> None:
    """Print the IPv4 address embedded in a hostname."""
    from .resolver import parse_ip_address

    setup_logging(args.verbose, stream=sys.stderr)
    try:
        print(parse_ip_address(args.hostname))
    except AddressError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)


def render_command(args: argparse.Namespace) -> None:
    """Print the resource that a request for a hostname would create."""
    import yaml
    from .provisioner import Provisioner

    setup_logging(args.verbose, stream=sys.stderr)
    provisioner_config = _resolve_config(args)

    # Rendering never touches the API server, so no store is needed.
    provisioner = Provisioner(store=None, config=provisioner_config)
    try:
        manifest = provisioner.render(args.hostname)
    except AddressError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)

    if args.output == "json":
        print(json.dumps(manifest, indent=2))
    else:
        print(yaml.safe_dump(manifest, default_flow_style=False, sort_keys=False), end="")


def init_config_command(args: argparse.Namespace) -> None:
    """Generate a sample configuration file."""
    import yaml
    from .models import ProvisionerConfig

    sample_config = ProvisionerConfig(kubeconfig_path="~/.kube/config", context="default").model_dump()
    config_yaml = yaml.dump(sample_config, default_flow_style=False, sort_keys=False)

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(config_yaml)
        print(f"Sample configuration written to {output_path}")
    else:
        print("Sample configuration:\n")
        print(config_yaml)


def validate_config_command(args: argparse.Namespace) -> None:
    """Validate a configuration file."""
    config_path = Path(args.config)

    try:
        provisioner_config = load_config(config_path)
    except ConfigurationError as e:
        print(f"✗ Configuration file {config_path} is invalid: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"✓ Configuration file {config_path} is valid")
    print(f"\nConfiguration summary:")
    print(f"  Kubeconfig: {provisioner_config.kubeconfig_path or 'in-cluster'}")
    print(f"  Context: {provisioner_config.context or 'current'}")
    print(f"  Ingress class: {provisioner_config.ingress_class_name}")
    print(f"  Upstream vhost: {provisioner_config.upstream_vhost}")
    print(f"  Request timeout: {provisioner_config.request_timeout or 'transport default'}")


def version_command(args: argparse.Namespace) -> None:
    """Show version information."""
    from . import __version__
    print(f"icanhazlb {__version__}")


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="icanhazlb: provision load balancer resources from IP-bearing hostnames",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the provisioning API server")
    serve_parser.add_argument("--config", "-c", help="Configuration file path")
    serve_parser.add_argument("--kubeconfig", help="Path to the kubeconfig file (default: in-cluster)")
    serve_parser.add_argument("--context", help="Kubernetes context to use")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")
    serve_parser.set_defaults(func=serve_command)

    resolve_parser = subparsers.add_parser("resolve", help="Print the IPv4 address embedded in a hostname")
    resolve_parser.add_argument("hostname", help="Hostname such as 203-0-113-5.lb.example.com")
    resolve_parser.set_defaults(func=resolve_command)

    render_parser = subparsers.add_parser("render", help="Print the resource a hostname would provision")
    render_parser.add_argument("hostname", help="Hostname such as 203-0-113-5.lb.example.com")
    render_parser.add_argument("--config", "-c", help="Configuration file path")
    render_parser.add_argument(
        "--output", "-o",
        choices=["json", "yaml"],
        default="yaml",
        help="Output format (default: yaml)"
    )
    render_parser.set_defaults(func=render_command)

    init_parser = subparsers.add_parser("init-config", help="Generate a sample configuration file")
    init_parser.add_argument("--output", "-o", help="Output file path (default: stdout)")
    init_parser.set_defaults(func=init_config_command)

    validate_parser = subparsers.add_parser("validate-config", help="Validate a configuration file")
    validate_parser.add_argument("--config", "-c", required=True, help="Configuration file path")
    validate_parser.set_defaults(func=validate_config_command)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=version_command)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
