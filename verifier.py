"""
Gmail Address Verifier - Main Entry Point

Queries Gmail to see whether email addresses exist:
- Probes the gxlu endpoint once per address with a pool of workers
- Reports each address as valid, invalid or unverifiable as soon as it completes

Defaults are read from config/settings.yaml; command-line flags override them.
"""

from verifiers import ConfigurationError, ConsoleReporter, Dispatcher, GmailProbeClient, ProxyManager, __version__
from verifiers.dispatcher import DEFAULT_POOL_SIZE
from verifiers.task_queue import DEFAULT_CAPACITY
from functools import partial
from typing import Callable, List, Optional
import argparse
import os
import yaml
import sys
import logging

DEFAULT_CONFIG_FILE = "config/settings.yaml"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def load_config(config_file: str = DEFAULT_CONFIG_FILE, required: bool = False) -> dict:
    """
    Load configuration from YAML file.

    Args:
        config_file: Path to configuration file
        required: Exit if the file does not exist (otherwise fall back to defaults)

    Returns:
        Configuration dictionary
    """
    if not os.path.exists(config_file) and not required:
        return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        print(f"Error: Configuration file '{config_file}' not found!", file=sys.stderr)
        sys.exit(1)
    except (OSError, yaml.YAMLError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if config is None:
        return {}
    if not isinstance(config, dict):
        print(f"Error loading configuration: '{config_file}' must contain a mapping", file=sys.stderr)
        sys.exit(1)
    return config


def setup_logging(config: dict, debug: bool = False):
    """
    Setup logging based on configuration.
    Log records go to stderr so stdout only carries verdict lines.

    Args:
        config: Configuration dictionary
        debug: Force DEBUG level
    """
    log_config = config.get('logging', {}) or {}
    log_file = log_config.get('log_file')

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    level = logging.DEBUG if debug else getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=log_config.get('format', DEFAULT_LOG_FORMAT),
        handlers=handlers,
        force=True
    )


def build_client_factory(config: dict) -> Callable[[], GmailProbeClient]:
    """
    Build the probe client factory from the probe and proxy sections.

    Args:
        config: Configuration dictionary

    Returns:
        Callable creating one GmailProbeClient per worker
    """
    probe_config = config.get('probe', {}) or {}
    proxy_config = config.get('proxy', {}) or {}

    timeout = probe_config.get('timeout', GmailProbeClient.DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigurationError(f"probe.timeout must be a positive number, got {timeout!r}")

    headers = probe_config.get('headers')
    if headers is not None and not isinstance(headers, dict):
        raise ConfigurationError("probe.headers must be a mapping")

    # One proxy manager shared by every worker so rotation is global
    proxy_manager = None
    if proxy_config.get('enabled', False):
        proxy_manager = ProxyManager(
            proxy_config.get('list_file', 'data/proxy.txt'),
            rate_limit_seconds=proxy_config.get('rate_limit', 1.0),
            scheme=proxy_config.get('scheme', 'socks5h')
        )
        if not proxy_manager.is_enabled():
            logging.getLogger(__name__).warning("Proxy enabled but no valid proxies loaded. Continuing without proxy.")
            proxy_manager = None

    return partial(
        GmailProbeClient,
        base_url=probe_config.get('base_url'),
        timeout=timeout,
        headers=headers,
        proxy_manager=proxy_manager
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gmail_address_verifier",
        description="Query Gmail to see if an email address is valid."
    )
    parser.add_argument('-w', '--workers', type=int, default=None,
                        help=f"number of workers to run (default: {DEFAULT_POOL_SIZE})")
    parser.add_argument('-d', '--debug', action='store_true', help="print debug info")
    parser.add_argument('-c', '--config', default=None,
                        help=f"settings file (default: {DEFAULT_CONFIG_FILE})")
    parser.add_argument('-V', '--version', action='version', version=__version__)
    parser.add_argument('emails', nargs='+', metavar='email address',
                        help="the email address(es) to lookup.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function - verifies the addresses given on the command line."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config:
        config = load_config(args.config, required=True)
    else:
        config = load_config(DEFAULT_CONFIG_FILE)

    setup_logging(config, debug=args.debug)
    logger = logging.getLogger(__name__)

    concurrency_config = config.get('concurrency', {}) or {}
    workers = args.workers if args.workers is not None else concurrency_config.get('max_workers', DEFAULT_POOL_SIZE)
    queue_capacity = concurrency_config.get('queue_capacity', DEFAULT_CAPACITY)

    reporter = ConsoleReporter(sys.stdout)

    try:
        dispatcher = Dispatcher(
            client_factory=build_client_factory(config),
            reporter=reporter,
            pool_size=workers,
            queue_capacity=queue_capacity
        )
    except ConfigurationError as e:
        parser.error(str(e))

    dispatcher.run(args.emails)

    counts = reporter.get_counts()
    logger.debug(f"Verification completed: Valid={counts['valid']}, Invalid={counts['invalid']}, Error={counts['error']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
