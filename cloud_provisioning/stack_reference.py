"""Read-only access to values exported by another stack of this project."""

from typing import Any, Mapping

import pulumi

from cloud_provisioning.errors import StackReferenceError
from cloud_provisioning.policy import Environment

FOLDER_ID_EXPORT = "folder_id"


def stack_name(environment: Environment, organization: str) -> str:
    """Fully qualified name of this project's stack for an environment.

    ``organization`` is the configured Pulumi organization, the same one
    the Pulumi Deployments OIDC provider trusts.
    """
    return f"{organization}/{pulumi.get_project()}/{environment.value}"


def resolve_export(stack: str, outputs: Mapping[str, Any] | None, key: str) -> Any:
    """Return one exported value or fail hard when it is absent."""
    value = (outputs or {}).get(key)
    if value is None or value == "":
        raise StackReferenceError(stack, key)
    return value


class ExportedState:
    """Exports of a previously applied stack.

    Lookups never fall back to a default: a missing key fails the run as
    soon as the value is resolved.
    """

    def __init__(self, name: str, opts: pulumi.ResourceOptions | None = None):
        self.name = name
        pulumi.log.info(f"Reading exports of stack '{name}'")
        self._reference = pulumi.StackReference(name, stack_name=name, opts=opts)

    def require(self, key: str) -> pulumi.Output[Any]:
        return self._reference.outputs.apply(
            lambda outputs: resolve_export(self.name, outputs, key)
        )
