#!/usr/bin/env python3
"""EC2 runner tools: CLI entrypoint."""

import argparse

from ec2runner.commands.lifecycle import register_lifecycle_commands
from ec2runner.commands.outputs import register_outputs_command
from ec2runner.commands.up import register_up_command
from ec2runner.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Provision an EC2 runner and install the server on it")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_up_command(subparsers)
    register_lifecycle_commands(subparsers)
    register_outputs_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
