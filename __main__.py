"""Entry point for `pulumi up` run directly in this directory."""

import pulumi

from ec2runner.config import load_config
from ec2runner.program import pulumi_program

config = load_config(pulumi.Config().get("configFile"))
pulumi_program(config)
