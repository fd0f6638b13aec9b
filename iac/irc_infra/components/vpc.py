"""VPC component with one public and one private subnet."""
from __future__ import annotations

import pulumi
from pulumi import ResourceOptions
from pulumi_aws import ec2

__all__ = ["Network"]


class Network(pulumi.ComponentResource):
    """Create a VPC, a public and a private subnet, and an internet route.

    Both subnets share one route table sending 0.0.0.0/0 through the internet
    gateway. Only the public subnet assigns public IPs on launch. The private
    subnet exists so the database subnet group spans two availability zones.
    """

    def __init__(
        self,
        name: str,
        *,
        region: str,
        cidr_block: str = "10.0.0.0/16",
        public_subnet_cidr: str = "10.0.1.0/24",
        private_subnet_cidr: str = "10.0.2.0/24",
        opts: ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:network:Vpc", name, None, opts)

        child_opts = ResourceOptions(parent=self)

        self.vpc = ec2.Vpc(
            f"{name}-vpc",
            cidr_block=cidr_block,
            enable_dns_hostnames=True,
            enable_dns_support=True,
            tags={"Name": f"{name}-vpc"},
            opts=child_opts,
        )

        self.public_subnet = ec2.Subnet(
            f"{name}-subnet",
            vpc_id=self.vpc.id,
            cidr_block=public_subnet_cidr,
            availability_zone=f"{region}a",
            # public IPs so the setup command can reach the instance over SSH
            map_public_ip_on_launch=True,
            tags={"Name": f"{name}-public"},
            opts=child_opts,
        )

        self.private_subnet = ec2.Subnet(
            f"{name}-subnet-2",
            vpc_id=self.vpc.id,
            cidr_block=private_subnet_cidr,
            availability_zone=f"{region}b",
            map_public_ip_on_launch=False,
            tags={"Name": f"{name}-private"},
            opts=child_opts,
        )

        self.internet_gateway = ec2.InternetGateway(
            f"{name}-igw",
            vpc_id=self.vpc.id,
            tags={"Name": f"{name}-igw"},
            opts=child_opts,
        )

        self.route_table = ec2.RouteTable(
            f"{name}-route-table",
            vpc_id=self.vpc.id,
            routes=[
                ec2.RouteTableRouteArgs(cidr_block="0.0.0.0/0", gateway_id=self.internet_gateway.id)
            ],
            tags={"Name": f"{name}-route-table"},
            opts=child_opts,
        )
        self.route_table_associations = [
            ec2.RouteTableAssociation(
                f"{name}-rta{index}",
                subnet_id=subnet.id,
                route_table_id=self.route_table.id,
                opts=child_opts,
            )
            for index, subnet in enumerate([self.public_subnet, self.private_subnet], start=1)
        ]

        self.vpc_id = self.vpc.id
        self.public_subnet_id = self.public_subnet.id
        self.private_subnet_id = self.private_subnet.id
        self.subnet_ids = [self.public_subnet.id, self.private_subnet.id]

        self.register_outputs(
            {
                "vpc_id": self.vpc_id,
                "public_subnet_id": self.public_subnet_id,
                "private_subnet_id": self.private_subnet_id,
            }
        )
