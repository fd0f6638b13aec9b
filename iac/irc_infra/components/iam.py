"""IAM role and instance profile for the application server."""
from __future__ import annotations

import json
from typing import Any, Dict

import pulumi
from pulumi import ResourceOptions
from pulumi_aws import iam

__all__ = ["assume_role_policy", "instance_policy", "InstanceIdentity"]

POLICY_VERSION = "2012-10-17"


def assume_role_policy(service: str = "ec2.amazonaws.com") -> Dict[str, Any]:
    """Trust policy letting ``service`` assume the role."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Action": "sts:AssumeRole",
                "Effect": "Allow",
                "Principal": {"Service": service},
            }
        ],
    }


def instance_policy(bucket_arn: str, parameter_arn: str) -> Dict[str, Any]:
    """Bucket access, EC2 describe calls and read access to the password parameter."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Action": ["s3:*"],
                "Effect": "Allow",
                "Resource": [bucket_arn, f"{bucket_arn}/*"],
            },
            {
                "Action": ["ec2:Describe*"],
                "Effect": "Allow",
                "Resource": "*",
            },
            {
                "Action": ["ssm:GetParameter"],
                "Effect": "Allow",
                "Resource": parameter_arn,
            },
        ],
    }


class InstanceIdentity(pulumi.ComponentResource):
    """Policy, role, attachment and instance profile for one EC2 instance."""

    role: iam.Role
    instance_profile: iam.InstanceProfile

    def __init__(
        self,
        name: str,
        *,
        bucket_arn: pulumi.Input[str],
        parameter_arn: pulumi.Input[str],
        opts: ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:iam:InstanceIdentity", name, None, opts)

        child_opts = ResourceOptions(parent=self)

        policy = iam.Policy(
            f"{name}-policy",
            policy=pulumi.Output.all(bucket_arn, parameter_arn).apply(
                lambda args: json.dumps(instance_policy(args[0], args[1]))
            ),
            opts=child_opts,
        )

        self.role = iam.Role(
            f"{name}-role",
            assume_role_policy=json.dumps(assume_role_policy("ec2.amazonaws.com")),
            opts=child_opts,
        )

        iam.RolePolicyAttachment(
            f"{name}-policy-attachment",
            policy_arn=policy.arn,
            role=self.role.name,
            opts=child_opts,
        )

        self.instance_profile = iam.InstanceProfile(
            f"{name}-profile",
            role=self.role.name,
            opts=child_opts,
        )

        self.profile_name = self.instance_profile.name

        self.register_outputs({"role_arn": self.role.arn, "profile_name": self.profile_name})
