"""One-shot remote command that installs and starts the server."""
from __future__ import annotations

from typing import Sequence

import pulumi
from pulumi import ResourceOptions
from pulumi_command import remote

__all__ = ["ApplicationDeployment"]


class ApplicationDeployment(pulumi.ComponentResource):
    """Run ``script`` over SSH once the instance is reachable.

    Success or failure of the script is reported by the Pulumi engine.
    Replacing the command deletes the old one first, so a changed script is
    rerun rather than skipped.
    """

    command: remote.Command
    command_options: ResourceOptions

    def __init__(
        self,
        name: str,
        *,
        host: pulumi.Input[str],
        user: str,
        private_key: pulumi.Input[str],
        script: pulumi.Input[str],
        depends_on: Sequence[pulumi.Resource] = (),
        opts: ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:deploy:Application", name, None, opts)

        connection = remote.ConnectionArgs(
            host=host,
            user=user,
            private_key=pulumi.Output.secret(private_key),
        )

        self.command_options = ResourceOptions(
            parent=self,
            delete_before_replace=True,
            depends_on=list(depends_on),
        )
        self.command = remote.Command(
            f"{name}-setup",
            connection=connection,
            create=script,
            opts=self.command_options,
        )

        self.stdout = self.command.stdout

        self.register_outputs({"stdout": self.stdout})
