"""SSH credential: generated RSA key registered as an EC2 key pair."""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws
import pulumi_tls as tls


@dataclass
class Credential:
    """Private key (kept in engine state) and its registered public half."""

    private_key: tls.PrivateKey
    key_pair: aws.ec2.KeyPair

    @property
    def private_key_openssh(self) -> pulumi.Output[str]:
        return self.private_key.private_key_openssh

    @property
    def key_name(self) -> pulumi.Output[str]:
        return self.key_pair.key_name


def create_private_key(name, rsa_bits=4096, opts=None):
    return tls.PrivateKey(
        name,
        algorithm="RSA",
        rsa_bits=rsa_bits,
        opts=opts or pulumi.ResourceOptions(),
    )


def create_key_pair(name, private_key, opts=None):
    """Register the public half of private_key as a login credential."""
    return aws.ec2.KeyPair(
        name,
        public_key=private_key.public_key_openssh,
        opts=opts or pulumi.ResourceOptions(),
    )
