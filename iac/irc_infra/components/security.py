"""Security groups for the application server and the database."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import pulumi
from pulumi import ResourceOptions
from pulumi_aws import ec2

from ..errors import InsecureIngressError

__all__ = [
    "PortRule",
    "application_ingress",
    "database_ingress",
    "ingress_args",
    "validate_database_ingress",
    "SecurityGroups",
]

ANYWHERE = "0.0.0.0/0"


@dataclass(frozen=True)
class PortRule:
    """A single-port ingress rule, open to CIDRs or to source groups."""

    port: int
    protocol: str = "tcp"
    cidr_blocks: Tuple[str, ...] = ()
    source_security_groups: Tuple[pulumi.Input[str], ...] = ()


def application_ingress(ports: Iterable[int]) -> List[PortRule]:
    return [PortRule(port=port, cidr_blocks=(ANYWHERE,)) for port in ports]


def database_ingress(port: int, source_security_group: pulumi.Input[str]) -> List[PortRule]:
    return [PortRule(port=port, source_security_groups=(source_security_group,))]


def ingress_args(rules: Iterable[PortRule]) -> List[ec2.SecurityGroupIngressArgs]:
    return [
        ec2.SecurityGroupIngressArgs(
            protocol=rule.protocol,
            from_port=rule.port,
            to_port=rule.port,
            cidr_blocks=list(rule.cidr_blocks) or None,
            security_groups=list(rule.source_security_groups) or None,
        )
        for rule in rules
    ]


def validate_database_ingress(ingress: Sequence[ec2.SecurityGroupIngressArgs]) -> None:
    """Reject database ingress not limited to source security groups.

    Runs on the exact arguments handed to the database security group.
    """
    for rule in ingress:
        blocks = list(rule.cidr_blocks or []) + list(rule.ipv6_cidr_blocks or [])
        if blocks:
            raise InsecureIngressError(
                f"Database port {rule.from_port} must not be open to {', '.join(blocks)}"
            )
        if rule.prefix_list_ids:
            raise InsecureIngressError(f"Database port {rule.from_port} must not be open to prefix lists")
        if not rule.security_groups:
            raise InsecureIngressError(
                f"Database port {rule.from_port} must be limited to the application security group"
            )


class SecurityGroups(pulumi.ComponentResource):
    """Application group open to the internet, database group open to it only."""

    app: ec2.SecurityGroup
    database: ec2.SecurityGroup

    def __init__(
        self,
        name: str,
        *,
        vpc_id: pulumi.Input[str],
        app_ports: Sequence[int] = (22, 80, 3000),
        db_port: int = 5432,
        opts: ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:network:SecurityGroups", name, None, opts)

        child_opts = ResourceOptions(parent=self)

        self.app = ec2.SecurityGroup(
            f"{name}-sg",
            vpc_id=vpc_id,
            description="ssh, http and react app ports",
            ingress=ingress_args(application_ingress(app_ports)),
            egress=[
                # -1 is every protocol
                ec2.SecurityGroupEgressArgs(protocol="-1", from_port=0, to_port=0, cidr_blocks=[ANYWHERE])
            ],
            tags={"Name": f"{name}-sg"},
            opts=child_opts,
        )

        db_ingress = ingress_args(database_ingress(db_port, self.app.id))
        validate_database_ingress(db_ingress)
        pulumi.log.info(f"Database port {db_port} limited to the application security group")

        self.database = ec2.SecurityGroup(
            f"{name}-db-sg",
            vpc_id=vpc_id,
            description="postgres from the application security group",
            ingress=db_ingress,
            tags={"Name": f"{name}-db-sg"},
            opts=child_opts,
        )

        self.app_security_group_id = self.app.id
        self.db_security_group_id = self.database.id

        self.register_outputs(
            {
                "app_security_group_id": self.app_security_group_id,
                "db_security_group_id": self.db_security_group_id,
            }
        )
