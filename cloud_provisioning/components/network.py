"""VPC, private DNS and (outside prod) egress and public DNS."""

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.components.dns_delegation import DnsSubdomainDelegation
from cloud_provisioning.config import PublicDnsConfig
from cloud_provisioning.naming import to_kebab_case
from cloud_provisioning.providers import create_cloudflare_provider
from cloud_provisioning.region import region_name
from cloud_provisioning.services.api import ApiService


class NetworkComponent(pulumi.ComponentResource):
    """Network infrastructure for one environment.

    Creates:
    - Global custom-mode VPC
    - Private zone ``<region>.sql.goog.`` for Cloud SQL PSC resolution
    - Cloud Router + NAT (when ``egress``)
    - Public zone ``<env>.<domain>.``, its Cloudflare delegation and the
      certificate chain for ``api.<env>.<domain>`` (when ``public_dns`` is
      enabled and a public domain is configured)
    """

    def __init__(
        self,
        name: str,
        apis: ApiService,
        region: str,
        environment: str,
        egress: bool,
        public_dns: bool,
        public_dns_config: PublicDnsConfig | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:gcp:NetworkComponent", name, None, opts)

        short_region = region_name(region)
        project_id = apis.project.project_id
        self.compute_api = apis.enable_apis(["compute.googleapis.com"])
        self.dns_api = apis.enable_apis(["dns.googleapis.com"])
        compute_opts = pulumi.ResourceOptions(parent=self, depends_on=self.compute_api)
        dns_opts = pulumi.ResourceOptions(parent=self, depends_on=self.dns_api)

        self.router: gcp.compute.Router | None = None
        self.nat: gcp.compute.RouterNat | None = None
        self.public_zone: gcp.dns.ManagedZone | None = None
        self.public_zone_nameservers: pulumi.Output[list[str]] | None = None
        self.certificate: gcp.certificatemanager.Certificate | None = None

        # 1. VPC (custom mode, unique per project)
        self.network = gcp.compute.Network(
            "global-vpc",
            name="global-vpc",
            project=project_id,
            auto_create_subnetworks=False,
            routing_mode="GLOBAL",
            opts=compute_opts,
        )
        self.network_id = self.network.id

        # 2. Private zone for Cloud SQL PSC. The Cloud SQL connectors verify
        # TLS against the hashed instance hostname under <region>.sql.goog.
        self.sql_zone = gcp.dns.ManagedZone(
            "cloud-sql-psc-zone",
            name="cloud-sql-psc-zone",
            project=project_id,
            dns_name=f"{region}.sql.goog.",
            description="Private zone for Cloud SQL PSC resolution",
            visibility="private",
            private_visibility_config=gcp.dns.ManagedZonePrivateVisibilityConfigArgs(
                networks=[
                    gcp.dns.ManagedZonePrivateVisibilityConfigNetworkArgs(
                        network_url=self.network.id,
                    )
                ],
            ),
            opts=dns_opts,
        )

        outputs = {
            "network_name": self.network.name,
            "sql_zone_name": self.sql_zone.name,
        }

        # 3. Cloud Router + NAT
        if egress:
            self.router = gcp.compute.Router(
                f"nat-router-{short_region}",
                name=f"nat-router-{short_region}",
                project=project_id,
                network=self.network.id,
                region=region,
                opts=compute_opts,
            )
            self.nat = gcp.compute.RouterNat(
                f"nat-{short_region}",
                name=f"nat-{short_region}",
                project=project_id,
                router=self.router.name,
                region=region,
                nat_ip_allocate_option="AUTO_ONLY",
                source_subnetwork_ip_ranges_to_nat="ALL_SUBNETWORKS_ALL_IP_RANGES",
                enable_dynamic_port_allocation=True,
                log_config=gcp.compute.RouterNatLogConfigArgs(
                    enable=True,
                    filter="ERRORS_ONLY",
                ),
                opts=compute_opts,
            )
            outputs["router_name"] = self.router.name

        # 4. Public DNS
        if public_dns and public_dns_config is None:
            pulumi.log.info(
                "No public domain configured; skipping public DNS zone and delegation",
                resource=self,
            )
        elif public_dns:
            self._create_public_dns(apis, environment, public_dns_config, dns_opts)
            outputs["public_zone_nameservers"] = self.public_zone_nameservers
            outputs["certificate"] = self.certificate.id

        self.register_outputs(outputs)

    def _create_public_dns(
        self,
        apis: ApiService,
        environment: str,
        config: PublicDnsConfig,
        dns_opts: pulumi.ResourceOptions,
    ) -> None:
        project_id = apis.project.project_id
        domain = config.domain
        zone_domain = f"{environment}.{domain}"
        api_host = f"api.{zone_domain}"
        zone_name = f"{to_kebab_case(domain)}-public-zone"

        # Dedicated zone for the delegated subdomain, owned by this stack
        self.public_zone = gcp.dns.ManagedZone(
            zone_name,
            name=zone_name,
            project=project_id,
            dns_name=f"{zone_domain}.",
            visibility="public",
            description=f"Public zone for {zone_domain}",
            opts=dns_opts,
        )
        self.public_zone_nameservers = self.public_zone.name_servers

        cloudflare_provider = create_cloudflare_provider(
            "cloudflare-provider",
            api_token=config.cloudflare_api_token,
            parent=self,
        )
        self.delegation = DnsSubdomainDelegation(
            f"{to_kebab_case(domain)}-dns-delegation",
            subdomain=environment,
            zone_id=config.cloudflare_zone_id,
            nameservers=self.public_zone.name_servers,
            provider=cloudflare_provider,
            comment=f"Delegate {zone_domain} to Cloud DNS",
            opts=pulumi.ResourceOptions(parent=self),
        )

        # Certificate chain: DNS authorization -> certificate -> map -> map entry
        cert_api = apis.enable_apis(["certificatemanager.googleapis.com"])
        cert_opts = pulumi.ResourceOptions(parent=self, depends_on=cert_api)

        dns_auth = gcp.certificatemanager.DnsAuthorization(
            "api-gateway-dns-auth",
            name="api-gateway-dns-auth",
            project=project_id,
            location="global",
            domain=api_host,
            opts=cert_opts,
        )
        self.certificate = gcp.certificatemanager.Certificate(
            "api-gateway-cert",
            name="api-gateway-cert",
            project=project_id,
            location="global",
            scope="DEFAULT",
            managed=gcp.certificatemanager.CertificateManagedArgs(
                domains=[api_host],
                dns_authorizations=[dns_auth.id],
            ),
            opts=cert_opts,
        )
        self.certificate_map = gcp.certificatemanager.CertificateMap(
            "api-gateway-cert-map",
            name="api-gateway-cert-map",
            project=project_id,
            opts=cert_opts,
        )
        gcp.certificatemanager.CertificateMapEntry(
            "api-gateway-cert-map-entry",
            name="api-gateway-cert-map-entry",
            project=project_id,
            map=self.certificate_map.name,
            certificates=[self.certificate.id],
            hostname=api_host,
            opts=cert_opts,
        )

        self.static_ip = gcp.compute.GlobalAddress(
            "api-gateway-static-ip",
            name="api-gateway-static-ip",
            project=project_id,
            address_type="EXTERNAL",
            ip_version="IPV4",
            opts=pulumi.ResourceOptions(parent=self, depends_on=self.compute_api),
        )

        # ACME-style validation record issued by the DNS authorization
        challenge = dns_auth.dns_resource_records.apply(lambda records: records[0])
        gcp.dns.RecordSet(
            "api-gateway-dns-auth-cname",
            name=challenge.apply(lambda r: r.name),
            managed_zone=self.public_zone.name,
            type="CNAME",
            project=project_id,
            ttl=300,
            rrdatas=[challenge.apply(lambda r: r.data)],
            opts=dns_opts,
        )
        gcp.dns.RecordSet(
            "api-gateway-a-record",
            name=f"{api_host}.",
            managed_zone=self.public_zone.name,
            type="A",
            project=project_id,
            ttl=300,
            rrdatas=[self.static_ip.address],
            opts=dns_opts,
        )
