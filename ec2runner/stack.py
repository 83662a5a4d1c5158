"""Pulumi Automation API wrapper: select the stack and run engine operations."""

import logging
import os

from pulumi import automation as auto

from ec2runner.config import RunnerConfig
from ec2runner.program import OUTPUT_SSH_KEY, pulumi_program

logger = logging.getLogger(__name__)


def select_stack(config: RunnerConfig) -> auto.Stack:
    """Create or select the stack running the runner program inline."""

    def program():
        pulumi_program(config)

    stack = auto.create_or_select_stack(
        stack_name=config.stack,
        project_name=config.project,
        program=program,
    )
    stack.set_config("aws:region", auto.ConfigValue(value=config.region))
    logger.info(f"Stack: {config.project}/{config.stack} ({config.region})")
    return stack


def up(stack: auto.Stack) -> dict:
    """Provision everything. Raises auto.CommandError on any step failure."""
    result = stack.up(on_output=logger.info)
    changes = result.summary.resource_changes or {}
    logger.info(f"Update {result.summary.result}: {_format_changes(changes)}")
    return result.outputs


def preview(stack: auto.Stack):
    result = stack.preview(on_output=logger.info)
    logger.info(f"Preview: {_format_changes(result.change_summary)}")
    return result.change_summary


def refresh(stack: auto.Stack):
    stack.refresh(on_output=logger.info)


def destroy(stack: auto.Stack):
    stack.destroy(on_output=logger.info)


def get_outputs(stack: auto.Stack) -> dict:
    return stack.outputs()


def _format_changes(changes) -> str:
    if not changes:
        return "no changes"
    # Preview keys are OpType enum members, update keys are plain strings
    return ", ".join(f"{getattr(op, 'value', op)}={count}" for op, count in sorted(changes.items()))


def format_outputs(outputs: dict, show_secrets=False) -> list[str]:
    """Render stack outputs as "name: value" lines, masking secrets."""
    lines = []
    for name in sorted(outputs):
        output = outputs[name]
        value = output.value
        if output.secret and not show_secrets:
            value = "[secret]"
        elif isinstance(value, str) and "\n" in value.strip():
            value = "\n  " + value.strip().replace("\n", "\n  ")
        lines.append(f"{name}: {value}")
    return lines


def write_private_key(path, outputs: dict) -> str:
    """Write the exported SSH private key to path with mode 0600."""
    if OUTPUT_SSH_KEY not in outputs:
        raise KeyError(f"Stack has no '{OUTPUT_SSH_KEY}' output. Has it been provisioned?")
    path = os.path.expanduser(path)
    key = outputs[OUTPUT_SSH_KEY].value
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(key)
    os.chmod(path, 0o600)
    return path
