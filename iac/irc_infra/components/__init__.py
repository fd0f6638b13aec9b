"""Pulumi ComponentResources for the react-irc deployment.

    from irc_infra.components import Network, StaticSite, ComputeInstance
"""
from .vpc import Network  # noqa: F401
from .security import SecurityGroups  # noqa: F401
from .s3 import StaticSite  # noqa: F401
from .database import Database  # noqa: F401
from .iam import InstanceIdentity  # noqa: F401
from .ec2 import ComputeInstance  # noqa: F401
from .deploy import ApplicationDeployment  # noqa: F401
