"""
Exceptions shared across modules.

User-facing failures (rejected rows, invalid field values) are never raised;
they travel back as ``(False, message)`` tuples. The exceptions here are for
conditions a caller cannot fix by changing its input.
"""


class ContractViolation(RuntimeError):
    """
    A trusted collaborator broke a guarantee it owes this module.

    Raised, never returned. Callers should let it propagate: it marks a bug
    upstream, not bad user input.
    """


class OperationInterrupted(Exception):
    """The interruptor fired before the operation reached the home context."""
