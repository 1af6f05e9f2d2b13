"""Tests for workload identity federation."""
import pulumi

from cloud_provisioning.components.workload_identity import WorkloadIdentityComponent
from tests.conftest import FOLDER_ID, PROJECT_NUMBER
from tests.helpers import assert_api_dependencies, project_services

SA_IAM_MEMBER = "gcp:serviceaccount/iAMMember:IAMMember"


def build_workload_identity(recorder):
    _, apis, iam = project_services()
    component = WorkloadIdentityComponent(
        "workload-identity",
        iam=iam,
        environment="dev",
        folder_id=FOLDER_ID,
        github_owner="liverty-music",
        ci_repository="backend",
        pulumi_org="pannpers",
        opts=recorder.opts,
    )
    return component, apis


@pulumi.runtime.test
def test_provider_conditions_are_exact(recorder):
    component, _ = build_workload_identity(recorder)

    def check(args):
        github_condition, pulumi_condition = args
        assert github_condition == "attribute.repository_owner == 'liverty-music'"
        assert pulumi_condition == "assertion.sub.startsWith('pulumi:deploy:org:pannpers:')"

    return pulumi.Output.all(
        component.github_provider.attribute_condition,
        component.provider.attribute_condition,
    ).apply(check)


@pulumi.runtime.test
def test_ci_account_is_bound_to_one_repository(recorder):
    component, _ = build_workload_identity(recorder)

    assert component.ci_match.allows("attribute.repository/liverty-music/backend")
    assert not component.ci_match.allows("attribute.repository/other-org/other-repo")
    assert sorted(recorder.names(SA_IAM_MEMBER)) == [
        "github-actions-wif-user",
        "pulumi-cloud-wif-user",
    ]

    [ci_binding] = [
        r.resource for r in recorder.of_type(SA_IAM_MEMBER) if r.name == "github-actions-wif-user"
    ]

    def check(member):
        assert member.endswith(
            "/workloadIdentityPools/external-providers/attribute.repository/liverty-music/backend"
        )
        assert f"/projects/{PROJECT_NUMBER}/" in member

    return ci_binding.member.apply(check)


@pulumi.runtime.test
def test_pulumi_account_roles(recorder):
    build_workload_identity(recorder)

    assert recorder.names("gcp:projects/iAMMember:IAMMember") == [
        "pulumi-cloud-x-owner",
        "github-actions-x-writer",
    ]
    assert recorder.names("gcp:folder/iAMMember:IAMMember") == ["pulumi-cloud-x-folder-viewer"]


@pulumi.runtime.test
def test_federation_resources_wait_for_iam_api(recorder):
    component, apis = build_workload_identity(recorder)

    assert_api_dependencies(recorder, apis)

    def check(name):
        assert name.endswith("/workloadIdentityPools/external-providers/providers/github-provider")

    return component.github_provider_name.apply(check)
