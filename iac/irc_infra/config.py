"""Stack settings read from Pulumi configuration and local key files."""
from __future__ import annotations

import base64
import binascii
import os
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import pulumi

from .errors import ConfigurationError

__all__ = ["StackSettings", "load_settings", "db_name"]

DEFAULT_APP_NAME = "react-irc"
DEFAULT_REGION = "us-east-1"
DEFAULT_REPOSITORY_URL = "https://github.com/denvermullets/react-irc.git"

# Amazon's own images
AMAZON_IMAGE_OWNER = "137112412989"

# gp2 minimum for the postgres engine
MIN_POSTGRES_STORAGE_GB = 20


def db_name(app_name: str) -> str:
    """Database name for ``app_name``: alphanumerics only."""
    name = re.sub(r"[^a-zA-Z0-9]", "", app_name)
    if not name:
        raise ConfigurationError(f"Cannot derive a database name from {app_name!r}")
    return name


@dataclass
class StackSettings:
    """Everything :func:`irc_infra.stack.build_stack` needs."""

    public_key: str
    private_key: pulumi.Input[str]
    db_password: pulumi.Input[str]
    client_dist_dir: str

    app_name: str = DEFAULT_APP_NAME
    region: str = DEFAULT_REGION

    vpc_cidr: str = "10.0.0.0/16"
    public_subnet_cidr: str = "10.0.1.0/24"
    private_subnet_cidr: str = "10.0.2.0/24"

    db_engine: str = "postgres"
    db_instance_class: str = "db.t4g.micro"
    db_allocated_storage: int = MIN_POSTGRES_STORAGE_GB
    db_username: str = "postgres"
    db_port: int = 5432

    instance_type: str = "t2.nano"
    image_name_filter: str = "al2023-ami-2023.*-x86_64"
    image_owner: str = AMAZON_IMAGE_OWNER
    image_id: Optional[str] = None
    ssh_user: str = "ec2-user"

    repository_url: str = DEFAULT_REPOSITORY_URL
    app_port: int = 8080
    node_major_version: int = 18
    app_ingress_ports: Tuple[int, ...] = (22, 80, 3000)

    @property
    def db_name(self) -> str:
        return db_name(self.app_name)

    @property
    def home_dir(self) -> str:
        return f"/home/{self.ssh_user}"

    def validate(self) -> None:
        for name in ("db_port", "app_port"):
            port = getattr(self, name)
            if not 0 < port < 65536:
                raise ConfigurationError(f"{name} must be between 1 and 65535, got {port}")
        for port in self.app_ingress_ports:
            if not 0 < port < 65536:
                raise ConfigurationError(f"Ingress port out of range: {port}")
        if self.db_engine == "postgres" and self.db_allocated_storage < MIN_POSTGRES_STORAGE_GB:
            raise ConfigurationError(
                f"postgres needs at least {MIN_POSTGRES_STORAGE_GB} GiB of storage, "
                f"got {self.db_allocated_storage}"
            )
        if not self.public_key.strip():
            raise ConfigurationError("Public key is empty")
        db_name(self.app_name)


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _decode_private_key(encoded: str) -> str:
    try:
        return base64.b64decode(encoded, validate=True).decode("ascii")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ConfigurationError(f"privateKeyBase64 is not valid base64 text: {e}") from e


def _private_key(config: pulumi.Config, base_dir: str, app_name: str) -> pulumi.Input[str]:
    encoded = config.get_secret("privateKeyBase64")
    if encoded is not None:
        pulumi.log.info("Using private key from privateKeyBase64")
        return pulumi.Output.secret(encoded.apply(_decode_private_key))

    path = os.path.join(base_dir, config.get("privateKeyPath") or f"{app_name}-deployment.pem")
    pulumi.log.info(f"Reading private key from {path}")
    return pulumi.Output.secret(_read_text(path))


def _int(config: pulumi.Config, key: str, default: int) -> int:
    """Like ``config.get_int``, but only a missing key takes the default."""
    value = config.get_int(key)
    return default if value is None else value


def _ports(raw: Optional[str], default: Tuple[int, ...]) -> Tuple[int, ...]:
    if not raw:
        return default
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except ValueError as e:
        raise ConfigurationError(f"appIngressPorts must be a comma separated list of ports: {raw!r}") from e


def load_settings(
    config: pulumi.Config,
    aws_config: Optional[pulumi.Config] = None,
    base_dir: Optional[str] = None,
) -> StackSettings:
    """Build :class:`StackSettings` from stack configuration.

    Key files are resolved against ``base_dir`` (the program directory by
    default). A missing key file raises ``FileNotFoundError``.
    """
    base_dir = base_dir or os.getcwd()
    region = (aws_config.get("region") if aws_config is not None else None) or DEFAULT_REGION
    app_name = config.get("appName") or DEFAULT_APP_NAME

    public_key_path = os.path.join(base_dir, config.get("publicKeyPath") or f"public-{app_name}.pub")
    pulumi.log.info(f"Reading public key from {public_key_path}")
    public_key = _read_text(public_key_path)

    client_dist_dir = os.path.join(base_dir, config.get("clientDistDir") or os.path.join(app_name, "client", "dist"))

    defaults = StackSettings(public_key="", private_key="", db_password="", client_dist_dir="")
    ingress_ports = _ports(config.get("appIngressPorts"), defaults.app_ingress_ports)
    private_key = _private_key(config, base_dir, app_name)

    settings = StackSettings(
        public_key=public_key,
        private_key=private_key,
        db_password=config.require_secret("dbPassword"),
        client_dist_dir=client_dist_dir,
        app_name=app_name,
        region=region,
        vpc_cidr=config.get("vpcCidr") or defaults.vpc_cidr,
        public_subnet_cidr=config.get("publicSubnetCidr") or defaults.public_subnet_cidr,
        private_subnet_cidr=config.get("privateSubnetCidr") or defaults.private_subnet_cidr,
        db_engine=config.get("dbEngine") or defaults.db_engine,
        db_instance_class=config.get("dbInstanceClass") or defaults.db_instance_class,
        db_allocated_storage=_int(config, "dbAllocatedStorage", defaults.db_allocated_storage),
        db_username=config.get("dbUsername") or defaults.db_username,
        db_port=_int(config, "dbPort", defaults.db_port),
        instance_type=config.get("instanceType") or defaults.instance_type,
        image_name_filter=config.get("imageNameFilter") or defaults.image_name_filter,
        image_owner=config.get("imageOwner") or defaults.image_owner,
        image_id=config.get("imageId"),
        ssh_user=config.get("sshUser") or defaults.ssh_user,
        repository_url=config.get("repositoryUrl") or defaults.repository_url,
        app_port=_int(config, "appPort", defaults.app_port),
        node_major_version=_int(config, "nodeMajorVersion", defaults.node_major_version),
        app_ingress_ports=ingress_ports,
    )
    settings.validate()
    return settings
