"""Tests for the cluster subnet, workload identities and cluster."""
import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.components.kubernetes import PODS_RANGE, SERVICES_RANGE, KubernetesComponent
from cloud_provisioning.config import RuntimeSecret
from cloud_provisioning.region import ADDRESS_PLANS, OSAKA
from tests.helpers import assert_api_dependencies, project_services

CLUSTER = "gcp:container/cluster:Cluster"
ACCOUNT = "gcp:serviceaccount/account:Account"
SECRET_ACCESSOR = "gcp:secretmanager/secretIamMember:SecretIamMember"


def build_kubernetes(recorder, create_cluster, secrets=()):
    _, apis, iam = project_services()
    registry_api = apis.enable_apis(["artifactregistry.googleapis.com"])
    registries = {
        name: gcp.artifactregistry.Repository(
            f"github-{name}-repository",
            repository_id=name,
            location=OSAKA,
            format="DOCKER",
            opts=pulumi.ResourceOptions(
                depends_on=registry_api, transformations=recorder.opts.transformations
            ),
        )
        for name in ("backend", "frontend")
    }
    kubernetes = KubernetesComponent(
        "kubernetes-cluster",
        apis=apis,
        iam=iam,
        region=OSAKA,
        network_id="projects/liverty-music-dev/global/networks/global-vpc",
        address_plan=ADDRESS_PLANS[OSAKA],
        artifact_registries=registries,
        create_cluster=create_cluster,
        deletion_protection=False,
        secrets=secrets,
        opts=recorder.opts,
    )
    return kubernetes, apis


@pulumi.runtime.test
def test_partial_provisioning_keeps_subnet_and_identities(recorder):
    kubernetes, _ = build_kubernetes(recorder, create_cluster=False)

    assert kubernetes.cluster is None
    assert recorder.of_type(CLUSTER) == []
    assert recorder.names("gcp:compute/subnetwork:Subnetwork") == ["cluster-subnet-osaka"]
    assert sorted(recorder.names(ACCOUNT)) == [
        "gke-node",
        "liverty-music-backend-app",
        "liverty-music-external-secrets",
    ]


@pulumi.runtime.test
def test_cluster_is_autopilot(recorder):
    kubernetes, apis = build_kubernetes(recorder, create_cluster=True)

    assert recorder.names(CLUSTER) == ["cluster-osaka"]
    assert_api_dependencies(recorder, apis)

    def check(args):
        autopilot, location, master_cidr = args
        assert autopilot is True
        assert location == OSAKA
        assert master_cidr == "172.16.0.0/28"

    return pulumi.Output.all(
        kubernetes.cluster.enable_autopilot,
        kubernetes.cluster.location,
        kubernetes.cluster.private_cluster_config.master_ipv4_cidr_block,
    ).apply(check)


@pulumi.runtime.test
def test_subnet_ranges_follow_address_plan(recorder):
    kubernetes, _ = build_kubernetes(recorder, create_cluster=False)
    plan = ADDRESS_PLANS[OSAKA]

    def check(args):
        cidr, ranges = args
        assert cidr == plan.subnet_cidr
        # List-of-args inputs come back from the mocks as plain dicts
        assert [r["ipCidrRange"] for r in ranges] == [plan.pods_cidr, plan.services_cidr]
        assert [r["rangeName"] for r in ranges] == [PODS_RANGE, SERVICES_RANGE]

    return pulumi.Output.all(
        kubernetes.subnet.ip_cidr_range, kubernetes.subnet.secondary_ip_ranges
    ).apply(check)


@pulumi.runtime.test
def test_registry_readers_per_identity(recorder):
    build_kubernetes(recorder, create_cluster=False)

    assert sorted(
        recorder.names("gcp:artifactregistry/repositoryIamMember:RepositoryIamMember")
    ) == [
        "backend-app-x-artifact-registry-reader",
        "backend-gke-node-x-artifact-registry-reader",
        "frontend-app-x-artifact-registry-reader",
        "frontend-gke-node-x-artifact-registry-reader",
    ]


@pulumi.runtime.test
def test_secrets_get_one_accessor_per_reader(recorder):
    kubernetes, apis = build_kubernetes(
        recorder,
        create_cluster=False,
        secrets=[RuntimeSecret(name="lastfm-api-key", value="s3cr3t")],
    )

    assert len(kubernetes.secrets) == 1
    assert recorder.names("gcp:secretmanager/secret:Secret") == ["lastfm-api-key"]
    assert sorted(recorder.names(SECRET_ACCESSOR)) == [
        "lastfm-api-key-backend-app-accessor",
        "lastfm-api-key-eso-accessor",
    ]
    # No project-wide secret accessor grant
    assert not any(
        name.endswith("secret-accessor")
        for name in recorder.names("gcp:projects/iAMMember:IAMMember")
    )
    assert_api_dependencies(recorder, apis)


@pulumi.runtime.test
def test_no_secrets_skips_secret_manager(recorder):
    _, apis = build_kubernetes(recorder, create_cluster=False)

    assert "secretmanager.googleapis.com" not in apis.enabled
    assert recorder.of_type(SECRET_ACCESSOR) == []
