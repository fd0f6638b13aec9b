"""Shell scripts run on the application server.

Scripts are ``string.Template`` texts with named placeholders. Every value is
shell quoted before substitution, and the database password is never part of
the rendered text: the host reads it from SSM Parameter Store when the script
runs, and percent-encodes it before it goes into ``DATABASE_URL``.
"""
from __future__ import annotations

import posixpath
import shlex
from dataclasses import dataclass
from string import Template
from typing import Mapping
from urllib.parse import urlparse

from .errors import ScriptParameterError

__all__ = [
    "AppEnvironment",
    "SetupScriptParams",
    "render_environment",
    "render_user_data",
    "render_setup_script",
    "repository_directory",
]


ENVIRONMENT_TEMPLATE = Template("""\
export NODE_ENV=$node_env
export PORT=$port
export BUCKET_NAME=$bucket_name
DB_PASSWORD="$$(aws ssm get-parameter --region $region --name $db_password_parameter --with-decryption --query Parameter.Value --output text | python3 -c 'import sys, urllib.parse; print(urllib.parse.quote(sys.stdin.read().rstrip("\\n"), safe=""))')"
export DATABASE_URL=postgres://$db_user:"$${DB_PASSWORD}"@$db_host:$db_port/$db_name
unset DB_PASSWORD
""")

USER_DATA_TEMPLATE = Template("""\
#!/bin/bash
cat > $profile_path <<'ENVIRONMENT'
$environment
ENVIRONMENT
chmod 0644 $profile_path
""")

SETUP_TEMPLATE = Template("""\
#!/bin/bash
set -e

if ! command -v node &> /dev/null
then
    curl -sL https://rpm.nodesource.com/setup_$node_major_version.x | sudo bash -
    sudo yum install -y nodejs
fi

$environment
if ! command -v git &> /dev/null
then
    sudo yum install -y git
fi

if ! command -v pm2 &> /dev/null
then
    sudo npm install -g pm2
fi

if ! command -v tsc &> /dev/null
then
    sudo npm install -g typescript
fi

cd $home_dir

echo "checking for existing repo"
if [ -d $checkout ]
then
    echo "deleting repo"
    rm -rf $checkout
fi

git clone $repository_url $checkout

cd $checkout/server

npm install

npm run prod:build
pm2 delete $process_name 2> /dev/null || true
pm2 start dist/index.js --name $process_name
""")


@dataclass(frozen=True)
class AppEnvironment:
    """Environment the Node server runs with."""

    bucket_name: str
    db_host: str
    db_name: str
    db_password_parameter: str
    region: str
    db_user: str = "postgres"
    db_port: int = 5432
    port: int = 8080
    node_env: str = "production"


@dataclass(frozen=True)
class SetupScriptParams:
    environment: AppEnvironment
    repository_url: str
    node_major_version: int = 18
    home_dir: str = "/home/ec2-user"
    process_name: str = "server"


def _quote(name: str, value: object) -> str:
    text = str(value)
    if "\n" in text or "\r" in text or "\x00" in text:
        raise ScriptParameterError(f"{name} must be a single line, got {text!r}")
    if not text:
        raise ScriptParameterError(f"{name} must not be empty")
    return shlex.quote(text)


def _substitute(template: Template, values: Mapping[str, object]) -> str:
    return template.substitute({name: _quote(name, value) for name, value in values.items()})


def repository_directory(repository_url: str) -> str:
    """Directory ``git clone`` creates for ``repository_url``."""
    path = urlparse(repository_url).path or repository_url
    name = posixpath.basename(path.rstrip("/"))
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name or name in (".", ".."):
        raise ScriptParameterError(f"Cannot derive a checkout directory from {repository_url!r}")
    return name


def render_environment(env: AppEnvironment) -> str:
    """Export block for NODE_ENV, PORT, BUCKET_NAME and DATABASE_URL."""
    if not 0 < int(env.port) < 65536:
        raise ScriptParameterError(f"port out of range: {env.port}")
    return _substitute(
        ENVIRONMENT_TEMPLATE,
        {
            "node_env": env.node_env,
            "port": int(env.port),
            "bucket_name": env.bucket_name,
            "region": env.region,
            "db_password_parameter": env.db_password_parameter,
            "db_user": env.db_user,
            "db_host": env.db_host,
            "db_port": int(env.db_port),
            "db_name": env.db_name,
        },
    )


def render_user_data(env: AppEnvironment, process_name: str = "server") -> str:
    """Startup script that installs the environment into a profile script."""
    profile_path = _quote("profile_path", f"/etc/profile.d/{process_name}-env.sh")
    return USER_DATA_TEMPLATE.substitute(
        profile_path=profile_path,
        environment=render_environment(env).rstrip("\n"),
    )


def render_setup_script(params: SetupScriptParams) -> str:
    """Idempotent install, clone, build and launch script for the server."""
    checkout = repository_directory(params.repository_url)
    values = {
        "node_major_version": int(params.node_major_version),
        "home_dir": params.home_dir,
        "checkout": checkout,
        "repository_url": params.repository_url,
        "process_name": params.process_name,
    }
    quoted = {name: _quote(name, value) for name, value in values.items()}
    return SETUP_TEMPLATE.substitute(quoted, environment=render_environment(params.environment))
