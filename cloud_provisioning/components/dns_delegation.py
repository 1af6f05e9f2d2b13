"""Delegation of a subdomain from Cloudflare to Cloud DNS."""

import pulumi
import pulumi_cloudflare as cloudflare

from cloud_provisioning.naming import fqdn

# Cloud DNS assigns exactly four nameservers to every managed zone
CLOUD_DNS_NAMESERVER_COUNT = 4


def nameserver_at(nameservers: list[str], index: int) -> str:
    return fqdn(nameservers[index])


class DnsSubdomainDelegation(pulumi.ComponentResource):
    """NS records in a Cloudflare zone pointing a subdomain at other nameservers.

    The record count is fixed so the records appear in previews before the
    nameservers are known.
    """

    def __init__(
        self,
        name: str,
        subdomain: str,
        zone_id: pulumi.Input[str],
        nameservers: pulumi.Input[list[str]],
        provider: cloudflare.Provider,
        comment: str | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:cloudflare:DnsSubdomainDelegation", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self, provider=provider)
        resolved = pulumi.Output.from_input(nameservers)

        self.records = [
            cloudflare.DnsRecord(
                f"{name}-ns-{index}",
                zone_id=zone_id,
                # Cloudflare appends the zone name
                name=subdomain,
                type="NS",
                content=resolved.apply(lambda ns, i=index: nameserver_at(ns, i)),
                ttl=3600,
                comment=comment,
                opts=child_opts,
            )
            for index in range(CLOUD_DNS_NAMESERVER_COUNT)
        ]

        self.register_outputs({"ns_records": [r.content for r in self.records]})
