"""GCP infrastructure for one environment."""

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.components.data_store import ConcertDataStore
from cloud_provisioning.components.kubernetes import KubernetesComponent
from cloud_provisioning.components.network import NetworkComponent
from cloud_provisioning.components.postgres import PostgresComponent
from cloud_provisioning.components.project import ProjectComponent
from cloud_provisioning.components.workload_identity import WorkloadIdentityComponent
from cloud_provisioning.config import Config
from cloud_provisioning.region import ADDRESS_PLANS

ARTIFACT_REGISTRIES = {
    "backend": "Docker repository for GitHub Backend Repository",
    "frontend": "Docker repository for GitHub Frontend Repository",
}

CI_REPOSITORY = "backend"


class CloudInfrastructure:
    """Wires the GCP components together.

    A plain class rather than a ComponentResource so resource URNs stay flat.
    Order: project and APIs -> network -> cluster (identities) -> database
    -> workload identity. The data store only needs the project.
    ``opts`` is passed to every top-level component.
    """

    def __init__(
        self,
        config: Config,
        prod_stack: str,
        opts: pulumi.ResourceOptions | None = None,
    ):
        policy = config.policy
        region = config.gcp.region
        address_plan = ADDRESS_PLANS[region]
        environment = config.environment.value
        self.region = region

        # 1. Folder, project, APIs
        self.project_basis = ProjectComponent("project", config, prod_stack, opts=opts)
        self.project = self.project_basis.project
        self.project_id = self.project_basis.project_id
        self.project_number = self.project_basis.project_number
        self.folder_id = self.project_basis.folder_id
        apis = self.project_basis.apis
        iam = self.project_basis.iam

        # 2. Network
        self.network = NetworkComponent(
            "network",
            apis=apis,
            region=region,
            environment=environment,
            egress=policy.egress,
            public_dns=policy.public_dns,
            public_dns_config=config.public_dns,
            opts=opts,
        )

        # 3. Search over artist sites
        self.data_store = ConcertDataStore("concert-data-store", apis=apis, iam=iam, opts=opts)

        # 4. Artifact Registry
        registry_api = apis.enable_apis(["artifactregistry.googleapis.com"])
        self.artifact_registries = {
            name: gcp.artifactregistry.Repository(
                f"github-{name}-repository",
                repository_id=name,
                location=region,
                format="DOCKER",
                project=self.project_id,
                description=description,
                opts=pulumi.ResourceOptions(parent=self.project, depends_on=registry_api),
            )
            for name, description in ARTIFACT_REGISTRIES.items()
        }

        # 5. Cluster subnet, identities and (policy permitting) the cluster
        self.kubernetes = KubernetesComponent(
            "kubernetes-cluster",
            apis=apis,
            iam=iam,
            region=region,
            network_id=self.network.network_id,
            address_plan=address_plan,
            artifact_registries=self.artifact_registries,
            create_cluster=policy.cluster,
            deletion_protection=policy.deletion_protection,
            secrets=config.gcp.runtime_secrets,
            opts=opts,
        )

        # 6. Database
        self.postgres: PostgresComponent | None = None
        if policy.database:
            self.postgres = PostgresComponent(
                "postgres",
                project=self.project,
                apis=apis,
                iam=iam,
                region=region,
                subnet_id=self.kubernetes.subnet_id,
                network_id=self.network.network_id,
                psc_endpoint_ip=address_plan.postgres_psc_ip,
                dns_zone_name=self.network.sql_zone.name,
                app_service_account_email=self.kubernetes.backend_app_service_account_email,
                availability=policy.database_availability,
                deletion_protection=policy.deletion_protection,
                iam_database_users=config.gcp.iam_database_users,
                opts=opts,
            )
        else:
            pulumi.log.info(f"Database disabled for the {environment} environment")

        # 7. Workload identity federation for CI/CD
        self.workload_identity = WorkloadIdentityComponent(
            "workload-identity",
            iam=iam,
            environment=environment,
            folder_id=self.folder_id,
            github_owner=config.brand_id,
            ci_repository=CI_REPOSITORY,
            pulumi_org=config.pulumi_organization,
            opts=opts,
        )
        self.github_workload_identity_provider = self.workload_identity.github_provider_name
        self.github_actions_sa_email = self.workload_identity.github_actions_sa_email
