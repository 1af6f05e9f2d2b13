"""Google API enablement."""

from typing import Sequence

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.naming import api_resource_name


class ApiService:
    """Enables Google APIs on a project, one activation record per API.

    Resources that call an API must list its activation record in
    ``depends_on``; the data flow alone does not order them. Asking for an
    API that is already enabled returns the existing record, so components
    can state what they need without coordinating with each other.
    """

    def __init__(
        self,
        project: gcp.organizations.Project,
        parent: pulumi.Resource | None = None,
        depends_on: Sequence[pulumi.Resource] | None = None,
    ):
        self._project = project
        self._parent = parent
        self._depends_on = list(depends_on or [])
        self._enabled: dict[str, gcp.projects.Service] = {}

    def enable_apis(self, apis: Sequence[str]) -> list[gcp.projects.Service]:
        return [self._enable(api) for api in apis]

    def _enable(self, api: str) -> gcp.projects.Service:
        if api not in self._enabled:
            self._enabled[api] = gcp.projects.Service(
                api_resource_name(api),
                project=self._project.project_id,
                service=api,
                # Teardown leaves APIs that other services still use enabled
                disable_on_destroy=True,
                disable_dependent_services=False,
                opts=pulumi.ResourceOptions(parent=self._parent, depends_on=self._depends_on),
            )
        return self._enabled[api]

    @property
    def enabled(self) -> dict[str, gcp.projects.Service]:
        return dict(self._enabled)

    @property
    def project(self) -> gcp.organizations.Project:
        return self._project
