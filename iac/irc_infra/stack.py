"""Compose the full react-irc resource graph from :class:`StackSettings`."""
from __future__ import annotations

from dataclasses import dataclass

import pulumi

from .components import (
    ApplicationDeployment,
    ComputeInstance,
    Database,
    InstanceIdentity,
    Network,
    SecurityGroups,
    StaticSite,
)
from .components.ec2 import find_latest_image
from .config import StackSettings
from .files import collect_site_objects
from .scripts import AppEnvironment, SetupScriptParams, render_setup_script, render_user_data

__all__ = ["StackOutputs", "build_stack"]


@dataclass
class StackOutputs:
    client_url: pulumi.Output[str]
    server_ip: pulumi.Output[str]
    site: StaticSite
    network: Network
    security: SecurityGroups
    database: Database
    identity: InstanceIdentity
    server: ComputeInstance
    deployment: ApplicationDeployment


def build_stack(settings: StackSettings) -> StackOutputs:
    """Declare every resource; the image lookup is the only provider call."""
    settings.validate()
    app = settings.app_name

    site_objects = collect_site_objects(settings.client_dist_dir)
    site = StaticSite(app, site_objects=site_objects)

    network = Network(
        app,
        region=settings.region,
        cidr_block=settings.vpc_cidr,
        public_subnet_cidr=settings.public_subnet_cidr,
        private_subnet_cidr=settings.private_subnet_cidr,
    )

    security = SecurityGroups(
        app,
        vpc_id=network.vpc_id,
        app_ports=settings.app_ingress_ports,
        db_port=settings.db_port,
    )

    database = Database(
        f"{app}-db",
        subnet_ids=network.subnet_ids,
        security_group_id=security.db_security_group_id,
        db_name=settings.db_name,
        password=settings.db_password,
        username=settings.db_username,
        engine=settings.db_engine,
        instance_class=settings.db_instance_class,
        allocated_storage=settings.db_allocated_storage,
        port=settings.db_port,
    )

    identity = InstanceIdentity(
        "instance",
        bucket_arn=site.bucket_arn,
        parameter_arn=database.password_parameter_arn,
    )

    environment = pulumi.Output.all(
        site.bucket_id, database.address, database.password_parameter_name
    ).apply(
        lambda args: AppEnvironment(
            bucket_name=args[0],
            db_host=args[1],
            db_name=settings.db_name,
            db_password_parameter=args[2],
            region=settings.region,
            db_user=settings.db_username,
            db_port=settings.db_port,
            port=settings.app_port,
        )
    )

    if settings.image_id:
        image_id = settings.image_id
        pulumi.log.info(f"Using configured image {image_id}")
    else:
        image_id = find_latest_image(settings.image_name_filter, settings.image_owner)

    server = ComputeInstance(
        app,
        subnet_id=network.public_subnet_id,
        security_group_id=security.app_security_group_id,
        instance_profile=identity.profile_name,
        public_key=settings.public_key,
        image_id=image_id,
        user_data=environment.apply(render_user_data),
        instance_type=settings.instance_type,
    )

    setup_script = environment.apply(
        lambda env: render_setup_script(
            SetupScriptParams(
                environment=env,
                repository_url=settings.repository_url,
                node_major_version=settings.node_major_version,
                home_dir=settings.home_dir,
            )
        )
    )

    deployment = ApplicationDeployment(
        "setupApplication",
        host=server.public_ip,
        user=settings.ssh_user,
        private_key=settings.private_key,
        script=setup_script,
        depends_on=[server.instance, database.instance],
    )

    return StackOutputs(
        client_url=pulumi.Output.concat("http://", site.website_endpoint),
        server_ip=server.public_ip,
        site=site,
        network=network,
        security=security,
        database=database,
        identity=identity,
        server=server,
        deployment=deployment,
    )
