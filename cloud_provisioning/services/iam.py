"""Service accounts and IAM role bindings."""

from typing import Sequence

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.conditions import PrincipalSetMatch
from cloud_provisioning.errors import DuplicateBindingError
from cloud_provisioning.naming import binding_name


class Roles:
    """IAM roles granted by this program."""

    class Project:
        OWNER = "roles/owner"

    class ResourceManager:
        FOLDER_VIEWER = "roles/resourcemanager.folderViewer"

    class CloudSql:
        CLIENT = "roles/cloudsql.client"
        INSTANCE_USER = "roles/cloudsql.instanceUser"

    class Logging:
        LOG_WRITER = "roles/logging.logWriter"

    class Monitoring:
        METRIC_WRITER = "roles/monitoring.metricWriter"
        VIEWER = "roles/monitoring.viewer"

    class CloudTrace:
        AGENT = "roles/cloudtrace.agent"

    class DiscoveryEngine:
        VIEWER = "roles/discoveryengine.viewer"

    class AiPlatform:
        USER = "roles/aiplatform.user"

    class ArtifactRegistry:
        READER = "roles/artifactregistry.reader"
        WRITER = "roles/artifactregistry.writer"

    class SecretManager:
        SECRET_ACCESSOR = "roles/secretmanager.secretAccessor"

    class Iam:
        WORKLOAD_IDENTITY_USER = "roles/iam.workloadIdentityUser"


def service_account_member(email: pulumi.Input[str]) -> pulumi.Output[str]:
    return pulumi.Output.concat("serviceAccount:", email)


class IamService:
    """Creates service accounts and binds roles at project, folder and resource scope.

    Binding resource names are derived from (principal, role) and the
    program's binding order, so a re-run produces the same names and the
    engine sees updates, not replacements. Every resource waits for the
    IAM-related API activations passed as ``depends_on``.
    """

    def __init__(
        self,
        project: gcp.organizations.Project,
        depends_on: Sequence[pulumi.Resource] | None = None,
    ):
        self.project = project
        self._depends_on = list(depends_on or [])
        self._issued: set[tuple[str, str]] = set()
        self._roles: set[tuple[str, str, str]] = set()

    @property
    def prerequisites(self) -> list[pulumi.Resource]:
        return list(self._depends_on)

    def _opts(
        self,
        parent: pulumi.Resource | None,
        depends_on: Sequence[pulumi.Resource] | None = None,
    ) -> pulumi.ResourceOptions:
        return pulumi.ResourceOptions(
            parent=parent,
            depends_on=self._depends_on + list(depends_on or []),
        )

    def _claim(self, scope: str, name: str) -> str:
        if (scope, name) in self._issued:
            raise DuplicateBindingError(f"binding '{name}' already exists at {scope} scope")
        self._issued.add((scope, name))
        return name

    def _claim_role(self, scope: str, principal: str, role: str) -> str:
        """Claim the binding name for (principal, role) within a scope.

        The short form (``backend-app-x-viewer``) is used unless another role
        with the same leaf already holds it, in which case the
        service-qualified form (``backend-app-x-discoveryengine-viewer``) is used.
        """
        if (scope, principal, role) in self._roles:
            raise DuplicateBindingError(
                f"'{role}' is already bound to '{principal}' at {scope} scope"
            )
        self._roles.add((scope, principal, role))
        name = binding_name(principal, role)
        if (scope, name) in self._issued:
            name = binding_name(principal, role, qualified=True)
        return self._claim(scope, name)

    def create_service_account(
        self,
        name: str,
        account_id: str,
        display_name: str,
        description: str,
        parent: pulumi.Resource | None = None,
    ) -> gcp.serviceaccount.Account:
        return gcp.serviceaccount.Account(
            name,
            account_id=account_id,
            display_name=display_name,
            description=description,
            project=self.project.project_id,
            opts=self._opts(parent),
        )

    def bind_project_roles(
        self,
        roles: Sequence[str],
        principal: str,
        email: pulumi.Input[str],
        parent: pulumi.Resource | None = None,
    ) -> list[gcp.projects.IAMMember]:
        return self.bind_project_member_roles(
            roles, principal, service_account_member(email), parent
        )

    def bind_project_member_roles(
        self,
        roles: Sequence[str],
        principal: str,
        member: pulumi.Input[str],
        parent: pulumi.Resource | None = None,
    ) -> list[gcp.projects.IAMMember]:
        """Bind roles to an arbitrary member, e.g. ``user:alice@example.com``."""
        return [
            gcp.projects.IAMMember(
                self._claim_role("project", principal, role),
                project=self.project.project_id,
                role=role,
                member=member,
                opts=self._opts(parent),
            )
            for role in roles
        ]

    def bind_folder_roles(
        self,
        roles: Sequence[str],
        principal: str,
        email: pulumi.Input[str],
        folder_id: pulumi.Input[str],
        parent: pulumi.Resource | None = None,
    ) -> list[gcp.folder.IAMMember]:
        return [
            gcp.folder.IAMMember(
                self._claim_role("folder", principal, role),
                folder=folder_id,
                role=role,
                member=service_account_member(email),
                opts=self._opts(parent),
            )
            for role in roles
        ]

    def bind_artifact_registry_reader(
        self,
        principal: str,
        email: pulumi.Input[str],
        repository: gcp.artifactregistry.Repository,
        parent: pulumi.Resource | None = None,
    ) -> gcp.artifactregistry.RepositoryIamMember:
        return gcp.artifactregistry.RepositoryIamMember(
            self._claim("repository", f"{principal}-x-artifact-registry-reader"),
            repository=repository.name,
            location=repository.location,
            project=self.project.project_id,
            role=Roles.ArtifactRegistry.READER,
            member=service_account_member(email),
            opts=self._opts(parent, depends_on=[repository]),
        )

    def bind_secret_accessor(
        self,
        name: str,
        email: pulumi.Input[str],
        secret: gcp.secretmanager.Secret,
        parent: pulumi.Resource | None = None,
    ) -> gcp.secretmanager.SecretIamMember:
        return gcp.secretmanager.SecretIamMember(
            self._claim("secret", name),
            secret_id=secret.secret_id,
            project=self.project.project_id,
            role=Roles.SecretManager.SECRET_ACCESSOR,
            member=service_account_member(email),
            opts=self._opts(parent, depends_on=[secret]),
        )

    def bind_wif_user(
        self,
        name: str,
        match: PrincipalSetMatch,
        account: gcp.serviceaccount.Account,
        pool: gcp.iam.WorkloadIdentityPool,
        parent: pulumi.Resource | None = None,
    ) -> gcp.serviceaccount.IAMMember:
        """Let external principals from a federation pool impersonate an account."""
        return gcp.serviceaccount.IAMMember(
            self._claim("service-account", f"{name}-wif-user"),
            service_account_id=account.name,
            role=Roles.Iam.WORKLOAD_IDENTITY_USER,
            member=pulumi.Output.concat(
                "principalSet://iam.googleapis.com/projects/",
                self.project.number,
                "/locations/global/workloadIdentityPools/",
                pool.workload_identity_pool_id,
                "/",
                match.member_path(),
            ),
            opts=self._opts(parent, depends_on=[pool]),
        )

    def bind_kubernetes_sa_user(
        self,
        name: str,
        account: gcp.serviceaccount.Account,
        namespace: str,
        parent: pulumi.Resource | None = None,
        depends_on: Sequence[pulumi.Resource] | None = None,
    ) -> gcp.serviceaccount.IAMMember:
        """Let the Kubernetes service account ``namespace/name`` impersonate an account.

        The cluster's workload identity pool is ``<project-id>.svc.id.goog``.
        """
        return gcp.serviceaccount.IAMMember(
            self._claim("service-account", f"{name}-k8s-sa-wif-user"),
            service_account_id=account.name,
            role=Roles.Iam.WORKLOAD_IDENTITY_USER,
            member=pulumi.Output.concat(
                "principal://iam.googleapis.com/projects/",
                self.project.number,
                "/locations/global/workloadIdentityPools/",
                self.project.project_id,
                ".svc.id.goog/subject/ns/",
                namespace,
                "/sa/",
                name,
            ),
            opts=self._opts(parent, depends_on=depends_on),
        )
