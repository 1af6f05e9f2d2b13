"""Tests for Cloudflare subdomain delegation."""
import pulumi

from cloud_provisioning.components.dns_delegation import (
    CLOUD_DNS_NAMESERVER_COUNT,
    DnsSubdomainDelegation,
)
from cloud_provisioning.providers import create_cloudflare_provider
from tests.conftest import NAMESERVERS


@pulumi.runtime.test
def test_one_ns_record_per_nameserver(recorder):
    provider = create_cloudflare_provider("cloudflare-provider", "cf_test")
    delegation = DnsSubdomainDelegation(
        "liverty-music-app-dns-delegation",
        subdomain="dev",
        zone_id="zone123",
        nameservers=pulumi.Output.from_input(NAMESERVERS),
        provider=provider,
        opts=recorder.opts,
    )

    assert len(delegation.records) == CLOUD_DNS_NAMESERVER_COUNT
    assert recorder.names("cloudflare:index/dnsRecord:DnsRecord") == [
        f"liverty-music-app-dns-delegation-ns-{i}" for i in range(CLOUD_DNS_NAMESERVER_COUNT)
    ]

    def check(args):
        names, types, contents = args[:4], args[4:8], args[8:]
        assert names == ["dev"] * 4
        assert types == ["NS"] * 4
        assert all(content.endswith(".") for content in contents)
        assert contents[1] == "ns-cloud-a2.googledomains.com."

    return pulumi.Output.all(
        *[r.name for r in delegation.records],
        *[r.type for r in delegation.records],
        *[r.content for r in delegation.records],
    ).apply(check)
