"""Preview, refresh and destroy commands."""

import logging
import sys

from ec2runner import stack as runner_stack
from ec2runner.commands import add_common_args, config_from_args, run_engine

logger = logging.getLogger(__name__)


def handle_preview(args):
    stack = runner_stack.select_stack(config_from_args(args))
    run_engine(lambda: runner_stack.preview(stack), "Preview")


def handle_refresh(args):
    stack = runner_stack.select_stack(config_from_args(args))
    run_engine(lambda: runner_stack.refresh(stack), "Refresh")


def handle_destroy(args):
    """Handle the destroy command. Requires --yes."""
    config = config_from_args(args)
    if not args.yes:
        logger.error(f"Refusing to destroy {config.project}/{config.stack} without --yes")
        sys.exit(1)
    stack = runner_stack.select_stack(config)
    run_engine(lambda: runner_stack.destroy(stack), "Destroy")
    logger.info("All runner resources destroyed.")


def register_lifecycle_commands(subparsers):
    """Register preview, refresh and destroy."""
    parser = subparsers.add_parser("preview", help="Show what up would change")
    add_common_args(parser)
    parser.set_defaults(func=handle_preview)

    parser = subparsers.add_parser("refresh", help="Reconcile recorded state with the cloud")
    add_common_args(parser)
    parser.set_defaults(func=handle_refresh)

    parser = subparsers.add_parser("destroy", help="Tear down every runner resource")
    add_common_args(parser)
    parser.add_argument("--yes", action="store_true", help="Confirm the teardown")
    parser.set_defaults(func=handle_destroy)
