"""Up command: provision the runner and install the server on it."""

import logging
import sys

from ec2runner import plan
from ec2runner import stack as runner_stack
from ec2runner.commands import add_common_args, config_from_args, run_engine
from ec2runner.program import (
    OUTPUT_INSTALL_STDERR,
    OUTPUT_INSTALL_STDOUT,
    OUTPUT_IP,
    OUTPUT_SSH_KEY,
    describe_step,
    runner_rules,
)
from ec2runner.provisioning import require_ssh_ingress

logger = logging.getLogger(__name__)


def handle_up(args):
    """Handle the up command."""
    config = config_from_args(args)

    try:
        plan.validate_plan(plan.RUNNER_STEPS)
        require_ssh_ingress(runner_rules(config))
    except ValueError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    if args.dry_run:
        log_dry_run(config)
        return

    stack = runner_stack.select_stack(config)
    outputs = run_engine(lambda: runner_stack.up(stack), "Provisioning")
    logger.info("")
    for line in runner_stack.format_outputs(outputs):
        logger.info(line)


def log_dry_run(config):
    """Log every step in declaration order without touching the engine."""
    logger.info(f"[dry-run] stack {config.project}/{config.stack} in {config.region}")
    for step in plan.RUNNER_STEPS:
        line = f"[dry-run] {step.name}: {describe_step(step, config)}"
        if step.depends_on:
            line += f" (after {', '.join(step.depends_on)})"
        if step.fresh:
            line += " [re-runs every up]" if config.triggers == "always" else " [re-runs on source change]"
        logger.info(line)
    exports = ", ".join([OUTPUT_IP, OUTPUT_SSH_KEY, OUTPUT_INSTALL_STDOUT, OUTPUT_INSTALL_STDERR])
    logger.info(f"[dry-run] exports: {exports}")


def register_up_command(subparsers):
    """Register the up command."""
    parser = subparsers.add_parser("up", help="Provision the runner and install the server")
    add_common_args(parser)
    parser.add_argument("--dry-run", action="store_true", help="Print the steps without provisioning")
    parser.set_defaults(func=handle_up)
