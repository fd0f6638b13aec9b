"""Exceptions raised while building the deployment graph."""

__all__ = [
    "ConfigurationError",
    "InsecureIngressError",
    "ObjectKeyCollisionError",
    "ScriptParameterError",
]


class ConfigurationError(ValueError):
    """Stack configuration is missing, malformed or out of range."""


class ObjectKeyCollisionError(ValueError):
    """Two local files normalize to the same bucket object key."""

    def __init__(self, key: str, first: str, second: str) -> None:
        super().__init__(f"Object key {key!r} derived from both {first} and {second}")
        self.key = key
        self.paths = (first, second)


class InsecureIngressError(ValueError):
    """A database ingress rule is open to a CIDR range."""


class ScriptParameterError(ValueError):
    """A value cannot be substituted into a shell script safely."""
