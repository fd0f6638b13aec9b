"""Pulumi program building the react-irc AWS deployment.

The resource graph is assembled by :func:`irc_infra.stack.build_stack` from an
explicit :class:`irc_infra.config.StackSettings`.
"""
