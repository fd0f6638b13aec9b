"""EC2 instance running the chat server."""
from __future__ import annotations

from typing import Optional

import pulumi
from pulumi import ResourceOptions
from pulumi_aws import ec2

__all__ = ["find_latest_image", "ComputeInstance"]


def find_latest_image(name_filter: str, owner: str) -> str:
    """Id of the newest image owned by ``owner`` whose name matches ``name_filter``.

    Lookup failures propagate and abort the program.
    """
    ami = ec2.get_ami(
        most_recent=True,
        owners=[owner],
        filters=[ec2.GetAmiFilterArgs(name="name", values=[name_filter])],
    )
    pulumi.log.info(f"Resolved image {ami.id} for {name_filter}")
    return ami.id


class ComputeInstance(pulumi.ComponentResource):
    """Key pair plus one instance in a public subnet."""

    instance: ec2.Instance
    key_pair: ec2.KeyPair
    public_ip: pulumi.Output[str]
    instance_id: pulumi.Output[str]

    def __init__(
        self,
        name: str,
        *,
        subnet_id: pulumi.Input[str],
        security_group_id: pulumi.Input[str],
        instance_profile: pulumi.Input[str],
        public_key: str,
        image_id: str,
        user_data: pulumi.Input[str],
        instance_type: str = "t2.nano",
        key_name: Optional[str] = None,
        opts: ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:compute:Instance", name, None, opts)

        child_opts = ResourceOptions(parent=self)

        self.key_pair = ec2.KeyPair(
            key_name or f"{name}-deployment",
            public_key=public_key,
            opts=child_opts,
        )

        self.instance = ec2.Instance(
            f"{name}-instance",
            instance_type=instance_type,
            ami=image_id,
            subnet_id=subnet_id,
            vpc_security_group_ids=[security_group_id],
            key_name=self.key_pair.key_name,
            user_data=user_data,
            iam_instance_profile=instance_profile,
            tags={"Name": f"{name}-server"},
            opts=child_opts,
        )

        self.public_ip = self.instance.public_ip
        self.instance_id = self.instance.id

        self.register_outputs({"instance_id": self.instance_id, "public_ip": self.public_ip})
