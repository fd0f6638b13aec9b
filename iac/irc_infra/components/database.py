"""PostgreSQL RDS instance whose password lives in SSM Parameter Store."""
from __future__ import annotations

from typing import Sequence

import pulumi
from pulumi import ResourceOptions
from pulumi_aws import rds, ssm

__all__ = ["Database"]


class Database(pulumi.ComponentResource):
    """RDS instance in its own subnet group.

    The password is also stored as an SSM ``SecureString`` so the server can
    read it at run time instead of receiving it in a script.
    """

    instance: rds.Instance
    password_parameter: ssm.Parameter

    def __init__(
        self,
        name: str,
        *,
        subnet_ids: Sequence[pulumi.Input[str]],
        security_group_id: pulumi.Input[str],
        db_name: str,
        password: pulumi.Input[str],
        username: str = "postgres",
        engine: str = "postgres",
        instance_class: str = "db.t4g.micro",
        allocated_storage: int = 20,
        port: int = 5432,
        opts: ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:database:Postgres", name, None, opts)

        child_opts = ResourceOptions(parent=self)

        subnet_group = rds.SubnetGroup(
            f"{name}-subnet-group",
            subnet_ids=list(subnet_ids),
            tags={"Name": f"{name}-subnet-group"},
            opts=child_opts,
        )

        self.password_parameter = ssm.Parameter(
            f"{name}-password",
            name=f"/{name}/database/password",
            type="SecureString",
            value=pulumi.Output.secret(password),
            description=f"Master password for the {db_name} database",
            opts=child_opts,
        )

        self.instance = rds.Instance(
            name,
            engine=engine,
            instance_class=instance_class,
            allocated_storage=allocated_storage,
            db_subnet_group_name=subnet_group.name,
            vpc_security_group_ids=[security_group_id],
            db_name=db_name,
            username=username,
            password=pulumi.Output.secret(password),
            port=port,
            skip_final_snapshot=True,
            tags={"Name": name},
            opts=child_opts,
        )

        self.db_name = db_name
        self.username = username
        self.address = self.instance.address
        self.endpoint = self.instance.endpoint
        self.port = self.instance.port
        self.password_parameter_name = self.password_parameter.name
        self.password_parameter_arn = self.password_parameter.arn

        self.register_outputs(
            {
                "address": self.address,
                "endpoint": self.endpoint,
                "password_parameter_name": self.password_parameter_name,
            }
        )
