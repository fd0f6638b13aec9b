"""An AWS Python Pulumi program for the react-irc chat app"""

import os

import pulumi

from irc_infra.config import load_settings
from irc_infra.stack import build_stack


settings = load_settings(
    pulumi.Config(),
    aws_config=pulumi.Config("aws"),
    base_dir=os.path.dirname(os.path.abspath(__file__)),
)

stack = build_stack(settings)

# Public URL of the client bucket
pulumi.export('clientUrl', stack.client_url)
# Public IP of the server instance
pulumi.export('serverIp', stack.server_ip)

pulumi.log.info(f"Declared {len(stack.site.objects)} client objects for {settings.app_name}")
