"""Tests for the Cloud SQL component and its PSC endpoint."""
import pulumi

from cloud_provisioning.components.postgres import APP_DATABASE, PostgresComponent
from cloud_provisioning.policy import Availability
from cloud_provisioning.region import ADDRESS_PLANS, OSAKA
from tests.conftest import INSTANCE_HASH
from tests.helpers import assert_api_dependencies, project_services

APP_EMAIL = "backend-app@liverty-music-dev.iam.gserviceaccount.com"


def build_postgres(recorder, iam_database_users=()):
    project, apis, iam = project_services()
    postgres = PostgresComponent(
        "postgres",
        project=project,
        apis=apis,
        iam=iam,
        region=OSAKA,
        subnet_id="projects/liverty-music-dev/regions/asia-northeast2/subnetworks/cluster-subnet-osaka",
        network_id="projects/liverty-music-dev/global/networks/global-vpc",
        psc_endpoint_ip=ADDRESS_PLANS[OSAKA].postgres_psc_ip,
        dns_zone_name="cloud-sql-psc-zone",
        app_service_account_email=APP_EMAIL,
        availability=Availability.ZONAL,
        deletion_protection=False,
        iam_database_users=iam_database_users,
        opts=recorder.opts,
    )
    return postgres, apis


@pulumi.runtime.test
def test_instance_named_after_region(recorder):
    postgres, _ = build_postgres(recorder)

    assert recorder.names("gcp:sql/databaseInstance:DatabaseInstance") == ["postgres-osaka"]
    assert recorder.names("gcp:compute/address:Address") == ["psc-endpoint-ip-postgres-osaka"]
    assert recorder.names("gcp:compute/forwardingRule:ForwardingRule") == ["psc-endpoint-postgres-osaka"]
    assert recorder.opts_of(postgres.psc_address).delete_before_replace

    def check(args):
        version, availability, ipv4 = args
        assert version == "POSTGRES_18"
        assert availability == "ZONAL"
        assert ipv4 is False

    return pulumi.Output.all(
        postgres.instance.database_version,
        postgres.instance.settings.availability_type,
        postgres.instance.settings.ip_configuration.ipv4_enabled,
    ).apply(check)


@pulumi.runtime.test
def test_dns_record_maps_instance_hostname_to_endpoint(recorder):
    postgres, _ = build_postgres(recorder)

    def check(args):
        name, rrdatas, record_type, dns_name = args
        assert dns_name == f"{INSTANCE_HASH}.asia-northeast2.sql.goog."
        assert name == dns_name
        assert record_type == "A"
        assert rrdatas == ["10.10.10.10"]

    return pulumi.Output.all(
        postgres.dns_record.name,
        postgres.dns_record.rrdatas,
        postgres.dns_record.type,
        postgres.instance.dns_name,
    ).apply(check)


@pulumi.runtime.test
def test_forwarding_rule_targets_service_attachment(recorder):
    postgres, _ = build_postgres(recorder)

    def check(args):
        target, attachment, scheme = args
        assert target == attachment
        assert scheme == ""

    return pulumi.Output.all(
        postgres.forwarding_rule.target,
        postgres.instance.psc_service_attachment_link,
        postgres.forwarding_rule.load_balancing_scheme,
    ).apply(check)


@pulumi.runtime.test
def test_app_user_drops_service_account_suffix(recorder):
    postgres, _ = build_postgres(recorder)

    assert recorder.names("gcp:sql/database:Database") == [APP_DATABASE]

    def check(args):
        name, user_type = args
        assert name == "backend-app@liverty-music-dev.iam"
        assert user_type == "CLOUD_IAM_SERVICE_ACCOUNT"

    return pulumi.Output.all(postgres.app_user.name, postgres.app_user.type).apply(check)


@pulumi.runtime.test
def test_human_users_get_instance_user_role(recorder):
    build_postgres(recorder, iam_database_users=["alice@example.com"])

    assert recorder.names("gcp:sql/user:User") == [APP_DATABASE, "iam-user-alice-example-com"]
    assert recorder.names("gcp:projects/iAMMember:IAMMember") == [
        "iam-user-alice-example-com-x-instance-user"
    ]


@pulumi.runtime.test
def test_postgres_resources_wait_for_apis(recorder):
    _, apis = build_postgres(recorder)

    assert "servicenetworking.googleapis.com" in apis.enabled
    assert_api_dependencies(recorder, apis)
