"""Outputs command: show exported values, optionally save the SSH key."""

import logging
import sys

from ec2runner import stack as runner_stack
from ec2runner.commands import add_common_args, config_from_args, run_engine

logger = logging.getLogger(__name__)


def handle_outputs(args):
    """Handle the outputs command."""
    stack = runner_stack.select_stack(config_from_args(args))
    outputs = run_engine(lambda: runner_stack.get_outputs(stack), "Reading outputs")
    if not outputs:
        logger.info("No outputs. Run 'ec2runner up' first.")
        return

    for line in runner_stack.format_outputs(outputs, show_secrets=args.show_secrets):
        logger.info(line)

    if args.ssh_key_out:
        try:
            path = runner_stack.write_private_key(args.ssh_key_out, outputs)
        except KeyError as e:
            logger.error(f"Error: {e.args[0]}")
            sys.exit(1)
        logger.info(f"\nSSH key written to {path}")


def register_outputs_command(subparsers):
    """Register the outputs command."""
    parser = subparsers.add_parser("outputs", help="Show the runner's exported outputs")
    add_common_args(parser)
    parser.add_argument("--show-secrets", action="store_true", help="Print secret outputs in plain text")
    parser.add_argument("--ssh-key-out", default=None, help="Write the SSH private key to this path (mode 0600)")
    parser.set_defaults(func=handle_outputs)
