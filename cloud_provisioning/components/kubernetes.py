"""GKE Autopilot cluster, its subnet and the workload identities around it."""

from typing import Mapping, Sequence

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.config import RuntimeSecret
from cloud_provisioning.region import AddressPlan, region_name
from cloud_provisioning.services.api import ApiService
from cloud_provisioning.services.iam import IamService, Roles

BACKEND_APP = "backend-app"
BACKEND_NAMESPACE = "backend"
ESO = "external-secrets"
ESO_NAMESPACE = "external-secrets"

PODS_RANGE = "pods-range"
SERVICES_RANGE = "services-range"

NODE_ROLES = [Roles.Logging.LOG_WRITER, Roles.Monitoring.METRIC_WRITER]
BACKEND_APP_ROLES = [
    Roles.Logging.LOG_WRITER,
    Roles.Monitoring.METRIC_WRITER,
    Roles.CloudTrace.AGENT,
    Roles.CloudSql.INSTANCE_USER,
    Roles.AiPlatform.USER,
]


class KubernetesComponent(pulumi.ComponentResource):
    """GKE cluster with dedicated identities.

    Creates:
    - Node service account (log/metric writer, registry reader) used instead
      of the default compute identity
    - ``backend-app`` service account, impersonable from
      ``backend/backend-app`` via workload identity
    - External Secrets Operator service account, impersonable from
      ``external-secrets/external-secrets``
    - Secret Manager secrets, each with per-secret accessor bindings for the
      application and the operator
    - Cluster subnet with pod and service secondary ranges
    - GKE Autopilot cluster (when ``create_cluster``)

    The subnet and identities are created even when the cluster is not.
    """

    def __init__(
        self,
        name: str,
        apis: ApiService,
        iam: IamService,
        region: str,
        network_id: pulumi.Input[str],
        address_plan: AddressPlan,
        artifact_registries: Mapping[str, gcp.artifactregistry.Repository],
        create_cluster: bool,
        deletion_protection: bool,
        secrets: Sequence[RuntimeSecret] = (),
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:gcp:KubernetesComponent", name, None, opts)

        short_region = region_name(region)
        project = iam.project
        self.container_api = apis.enable_apis(["container.googleapis.com"])
        compute_api = apis.enable_apis(["compute.googleapis.com"])

        # 1. Node identity
        node_sa = iam.create_service_account(
            "gke-node",
            "gke-node",
            "GKE Node Service Account",
            "Service Account for GKE Autopilot Nodes",
            parent=self,
        )
        self.node_service_account_email = node_sa.email
        iam.bind_project_roles(NODE_ROLES, "gke-node", node_sa.email, parent=self)
        for registry_name, registry in artifact_registries.items():
            iam.bind_artifact_registry_reader(
                f"{registry_name}-gke-node", node_sa.email, registry, parent=self
            )

        # 2. Application identity
        backend_app_sa = iam.create_service_account(
            f"liverty-music-{BACKEND_APP}",
            BACKEND_APP,
            "Liverty Music Backend Application Service Account",
            "Service account for backend application",
            parent=self,
        )
        self.backend_app_service_account = backend_app_sa
        self.backend_app_service_account_email = backend_app_sa.email
        for registry_name, registry in artifact_registries.items():
            iam.bind_artifact_registry_reader(
                f"{registry_name}-app", backend_app_sa.email, registry, parent=self
            )
        iam.bind_project_roles(BACKEND_APP_ROLES, BACKEND_APP, backend_app_sa.email, parent=self)
        iam.bind_kubernetes_sa_user(
            BACKEND_APP,
            backend_app_sa,
            BACKEND_NAMESPACE,
            parent=self,
            depends_on=self.container_api,
        )

        # 3. External Secrets Operator identity. The operator authenticates as
        # its own account rather than sharing backend-app.
        eso_sa = iam.create_service_account(
            f"liverty-music-{ESO}",
            ESO,
            "External Secrets Operator Service Account",
            "Service account for ESO controller to read GCP Secret Manager secrets",
            parent=self,
        )
        self.eso_service_account_email = eso_sa.email
        iam.bind_kubernetes_sa_user(
            ESO, eso_sa, ESO_NAMESPACE, parent=self, depends_on=self.container_api
        )

        # 4. Runtime secrets with per-secret accessors only
        self.secrets: list[gcp.secretmanager.Secret] = []
        if secrets:
            secret_api = apis.enable_apis(["secretmanager.googleapis.com"])
            for secret in secrets:
                self.secrets.append(
                    self._create_secret(iam, secret, secret_api, backend_app_sa, eso_sa)
                )
        else:
            pulumi.log.info("No runtime secrets configured; skipping Secret Manager", resource=self)

        # 5. Cluster subnet
        self.subnet = gcp.compute.Subnetwork(
            f"cluster-subnet-{short_region}",
            name=f"cluster-subnet-{short_region}",
            project=project.project_id,
            network=network_id,
            region=region,
            ip_cidr_range=address_plan.subnet_cidr,
            private_ip_google_access=True,
            secondary_ip_ranges=[
                gcp.compute.SubnetworkSecondaryIpRangeArgs(
                    range_name=PODS_RANGE,
                    ip_cidr_range=address_plan.pods_cidr,
                ),
                gcp.compute.SubnetworkSecondaryIpRangeArgs(
                    range_name=SERVICES_RANGE,
                    ip_cidr_range=address_plan.services_cidr,
                ),
            ],
            opts=pulumi.ResourceOptions(parent=self, depends_on=compute_api),
        )
        self.subnet_id = self.subnet.id

        outputs = {
            "subnet_id": self.subnet_id,
            "node_service_account_email": self.node_service_account_email,
            "backend_app_service_account_email": self.backend_app_service_account_email,
        }

        # 6. Autopilot cluster
        self.cluster: gcp.container.Cluster | None = None
        if create_cluster:
            self.cluster = gcp.container.Cluster(
                f"cluster-{short_region}",
                name=f"cluster-{short_region}",
                project=project.project_id,
                location=region,
                enable_autopilot=True,
                deletion_protection=deletion_protection,
                network=network_id,
                subnetwork=self.subnet.id,
                # Dataplane V2
                datapath_provider="ADVANCED_DATAPATH",
                cluster_autoscaling=gcp.container.ClusterClusterAutoscalingArgs(
                    auto_provisioning_defaults=gcp.container.ClusterClusterAutoscalingAutoProvisioningDefaultsArgs(
                        service_account=node_sa.email,
                    ),
                ),
                ip_allocation_policy=gcp.container.ClusterIpAllocationPolicyArgs(
                    cluster_secondary_range_name=PODS_RANGE,
                    services_secondary_range_name=SERVICES_RANGE,
                ),
                private_cluster_config=gcp.container.ClusterPrivateClusterConfigArgs(
                    enable_private_nodes=True,
                    # Public endpoint stays open for development access
                    enable_private_endpoint=False,
                    master_ipv4_cidr_block=address_plan.master_cidr,
                ),
                release_channel=gcp.container.ClusterReleaseChannelArgs(channel="REGULAR"),
                cost_management_config=gcp.container.ClusterCostManagementConfigArgs(enabled=True),
                opts=pulumi.ResourceOptions(parent=self, depends_on=self.container_api),
            )
            outputs["cluster_name"] = self.cluster.name
            outputs["cluster_endpoint"] = self.cluster.endpoint
        else:
            pulumi.log.info("Cluster disabled for this environment; subnet and identities only", resource=self)

        self.register_outputs(outputs)

    def _create_secret(
        self,
        iam: IamService,
        secret: RuntimeSecret,
        secret_api: list[gcp.projects.Service],
        backend_app_sa: gcp.serviceaccount.Account,
        eso_sa: gcp.serviceaccount.Account,
    ) -> gcp.secretmanager.Secret:
        resource = gcp.secretmanager.Secret(
            secret.name,
            secret_id=secret.name,
            project=iam.project.project_id,
            replication=gcp.secretmanager.SecretReplicationArgs(
                auto=gcp.secretmanager.SecretReplicationAutoArgs(),
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=secret_api),
        )
        gcp.secretmanager.SecretVersion(
            f"{secret.name}-version",
            secret=resource.id,
            secret_data=pulumi.Output.secret(secret.value),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[resource]),
        )
        iam.bind_secret_accessor(
            f"{secret.name}-backend-app-accessor", backend_app_sa.email, resource, parent=self
        )
        iam.bind_secret_accessor(f"{secret.name}-eso-accessor", eso_sa.email, resource, parent=self)
        return resource
