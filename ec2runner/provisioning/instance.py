"""Compute instance declaration."""

import logging

import pulumi
import pulumi_aws as aws

logger = logging.getLogger(__name__)


def create_instance(name, security_group, credential, instance_type="t2.micro", ami="ami-0b0dcb5067f052a63", opts=None):
    """Declare one instance with the security group and key pair attached.

    The public IP is only known once the engine has created the instance;
    later steps consume it as an Output.
    """
    logger.debug(f"{name}: {instance_type} from {ami}")
    return aws.ec2.Instance(
        name,
        instance_type=instance_type,
        ami=ami,
        vpc_security_group_ids=[security_group.id],
        key_name=credential.key_name,
        opts=opts or pulumi.ResourceOptions(),
    )
