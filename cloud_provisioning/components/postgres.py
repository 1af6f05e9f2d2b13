"""Cloud SQL for PostgreSQL reachable only through Private Service Connect."""

from typing import Sequence

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.naming import iam_database_user_name, sanitize_email
from cloud_provisioning.policy import Availability
from cloud_provisioning.region import region_name
from cloud_provisioning.services.api import ApiService
from cloud_provisioning.services.iam import IamService, Roles

APP_DATABASE = "backend-app"

# 18:00 UTC lands at 03:00 JST the following day
BACKUP_START_TIME = "18:00"
# Sunday, 04:00
MAINTENANCE_DAY = 7
MAINTENANCE_HOUR = 4

DATABASE_FLAGS = {
    "cloudsql.iam_authentication": "on",
    "log_checkpoints": "on",
    "log_connections": "on",
    "log_disconnections": "on",
    "log_lock_waits": "on",
    # Milliseconds
    "log_min_duration_statement": "1000",
}


class PostgresComponent(pulumi.ComponentResource):
    """PostgreSQL instance with a PSC endpoint and IAM database users.

    The connection is wired in a fixed order:

    1. Reserve the endpoint address in the consumer subnet.
    2. Create the instance with PSC enabled; the provider computes the
       service attachment link and the hashed DNS name.
    3. Forward the reserved address to the service attachment.
    4. Resolve the instance DNS name to the reserved address in the shared
       private zone.
    5. Create the application database and IAM users.
    """

    def __init__(
        self,
        name: str,
        project: gcp.organizations.Project,
        apis: ApiService,
        iam: IamService,
        region: str,
        subnet_id: pulumi.Input[str],
        network_id: pulumi.Input[str],
        psc_endpoint_ip: str,
        dns_zone_name: pulumi.Input[str],
        app_service_account_email: pulumi.Input[str],
        availability: Availability,
        deletion_protection: bool,
        iam_database_users: Sequence[str] = (),
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:gcp:PostgresComponent", name, None, opts)

        self.enabled_apis = apis.enable_apis(
            [
                "sqladmin.googleapis.com",
                "servicenetworking.googleapis.com",  # PSC
            ]
        )
        compute_api = apis.enable_apis(["compute.googleapis.com"])
        dns_api = apis.enable_apis(["dns.googleapis.com"])

        instance_name = f"postgres-{region_name(region)}"

        # 1. Static internal address for the endpoint
        self.psc_address = gcp.compute.Address(
            f"psc-endpoint-ip-{instance_name}",
            name=f"psc-endpoint-ip-{instance_name}",
            project=project.project_id,
            region=region,
            subnetwork=subnet_id,
            address_type="INTERNAL",
            address=psc_endpoint_ip,
            # A claimed static address cannot be updated in place
            opts=pulumi.ResourceOptions(
                parent=self,
                depends_on=compute_api,
                delete_before_replace=True,
            ),
        )

        # 2. Instance (producer side)
        self.instance = gcp.sql.DatabaseInstance(
            instance_name,
            name=instance_name,
            project=project.project_id,
            region=region,
            database_version="POSTGRES_18",
            deletion_protection=deletion_protection,
            settings=gcp.sql.DatabaseInstanceSettingsArgs(
                tier="db-f1-micro",
                edition="ENTERPRISE",
                availability_type=availability.value,
                disk_size=10,
                disk_type="PD_SSD",
                disk_autoresize=True,
                deletion_protection_enabled=deletion_protection,
                backup_configuration=gcp.sql.DatabaseInstanceSettingsBackupConfigurationArgs(
                    enabled=True,
                    start_time=BACKUP_START_TIME,
                    point_in_time_recovery_enabled=True,
                    transaction_log_retention_days=7,
                ),
                maintenance_window=gcp.sql.DatabaseInstanceSettingsMaintenanceWindowArgs(
                    day=MAINTENANCE_DAY,
                    hour=MAINTENANCE_HOUR,
                ),
                ip_configuration=gcp.sql.DatabaseInstanceSettingsIpConfigurationArgs(
                    ipv4_enabled=False,
                    ssl_mode="ENCRYPTED_ONLY",
                    enable_private_path_for_google_cloud_services=True,
                    psc_configs=[
                        gcp.sql.DatabaseInstanceSettingsIpConfigurationPscConfigArgs(
                            psc_enabled=True,
                            allowed_consumer_projects=[project.project_id],
                        )
                    ],
                ),
                insights_config=gcp.sql.DatabaseInstanceSettingsInsightsConfigArgs(
                    query_insights_enabled=True,
                    record_application_tags=True,
                    record_client_address=False,
                ),
                database_flags=[
                    gcp.sql.DatabaseInstanceSettingsDatabaseFlagArgs(name=flag, value=value)
                    for flag, value in DATABASE_FLAGS.items()
                ],
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=self.enabled_apis),
        )

        # 3. Forwarding rule: the endpoint itself. Waits on the attachment link.
        self.forwarding_rule = gcp.compute.ForwardingRule(
            f"psc-endpoint-{instance_name}",
            name=f"psc-endpoint-{instance_name}",
            project=project.project_id,
            region=region,
            network=network_id,
            subnetwork=subnet_id,
            ip_address=self.psc_address.id,
            target=self.instance.psc_service_attachment_link,
            # Must be empty for PSC
            load_balancing_scheme="",
            opts=pulumi.ResourceOptions(parent=self, depends_on=compute_api),
        )

        # 4. Hashed *.sql.goog hostname -> endpoint address
        self.dns_record = gcp.dns.RecordSet(
            f"private-db-a-record-{instance_name}",
            name=self.instance.dns_name,
            project=project.project_id,
            managed_zone=dns_zone_name,
            type="A",
            ttl=300,
            rrdatas=[self.psc_address.address],
            opts=pulumi.ResourceOptions(parent=self, depends_on=dns_api),
        )

        # 5. Application database and users
        self.database = gcp.sql.Database(
            APP_DATABASE,
            name=APP_DATABASE,
            project=project.project_id,
            instance=self.instance.name,
            charset="UTF8",
            collation="en_US.UTF8",
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.instance]),
        )

        self.app_user = gcp.sql.User(
            APP_DATABASE,
            name=pulumi.Output.from_input(app_service_account_email).apply(iam_database_user_name),
            project=project.project_id,
            instance=self.instance.name,
            type="CLOUD_IAM_SERVICE_ACCOUNT",
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.instance]),
        )

        # Human access, e.g. Cloud SQL Studio
        self.human_users = []
        for email in iam_database_users:
            sanitized = sanitize_email(email)
            self.human_users.append(
                gcp.sql.User(
                    f"iam-user-{sanitized}",
                    name=email,
                    project=project.project_id,
                    instance=self.instance.name,
                    type="CLOUD_IAM_USER",
                    opts=pulumi.ResourceOptions(parent=self, depends_on=[self.instance]),
                )
            )
            iam.bind_project_member_roles(
                [Roles.CloudSql.INSTANCE_USER],
                f"iam-user-{sanitized}",
                f"user:{email}",
                parent=self,
            )

        self.connection_name = self.instance.connection_name
        self.psc_endpoint_ip = self.psc_address.address

        self.register_outputs(
            {
                "instance_connection_name": self.connection_name,
                "psc_service_attachment": self.instance.psc_service_attachment_link,
                "psc_endpoint_ip": self.psc_endpoint_ip,
                "dns_record": self.dns_record.name,
            }
        )
