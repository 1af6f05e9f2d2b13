"""Errors raised while composing the Liverty Music infrastructure."""

import pulumi


class ConfigurationError(pulumi.RunError):
    """Required stack configuration is missing or malformed."""


class StackReferenceError(pulumi.RunError):
    """A referenced stack has not exported a required value."""

    def __init__(self, stack_name: str, key: str):
        self.stack_name = stack_name
        self.key = key
        super().__init__(
            f"Stack '{stack_name}' does not export '{key}'. "
            f"Apply the '{stack_name}' stack before deploying this environment."
        )


class AttributeConditionError(ValueError):
    """A federation attribute condition cannot be expressed as a precise match."""


class DuplicateBindingError(ValueError):
    """The same role binding was requested twice within one scope."""
