"""CLI commands. Each module exposes a register_*_command(subparsers)."""

import logging
import sys

from pulumi import automation as auto

from ec2runner.config import load_config

logger = logging.getLogger(__name__)


def add_common_args(parser):
    """Options shared by every stack command."""
    parser.add_argument("--config", default=None, help="Runner config YAML (default: ./runner.yaml if present)")
    parser.add_argument("--stack", default=None, help="Stack name (overrides config)")
    parser.add_argument("--region", default=None, help="AWS region (overrides config)")


def config_from_args(args):
    config = load_config(args.config)
    if args.stack:
        config.stack = args.stack
    if args.region:
        config.region = args.region
    return config


def run_engine(action, description):
    """Run an engine operation, exiting with status 1 if it fails."""
    try:
        return action()
    except auto.CommandError as e:
        logger.error(f"{description} failed: {e}")
        sys.exit(1)
