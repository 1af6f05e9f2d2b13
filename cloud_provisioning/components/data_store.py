"""Vertex AI Search over official artist websites."""

import pulumi
import pulumi_gcp as gcp

from cloud_provisioning.services.api import ApiService
from cloud_provisioning.services.iam import IamService, Roles


class ConcertDataStore(pulumi.ComponentResource):
    """Website data store, crawl target and search engine with LLM add-ons.

    Depends only on the project and its own API activations.
    """

    def __init__(
        self,
        name: str,
        apis: ApiService,
        iam: IamService,
        site_pattern: str = "www.uverworld.jp/*",
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:gcp:ConcertDataStore", name, None, opts)

        project = iam.project
        self.enabled_apis = apis.enable_apis(
            [
                "discoveryengine.googleapis.com",
                "aiplatform.googleapis.com",
            ]
        )

        self.data_store = gcp.discoveryengine.DataStore(
            "official-artist-site",
            location="global",
            data_store_id="official-artist-site",
            display_name="Official Artist Site",
            industry_vertical="GENERIC",
            content_config="PUBLIC_WEBSITE",
            solution_types=["SOLUTION_TYPE_SEARCH"],
            # Required for extractive segments
            create_advanced_site_search=True,
            skip_default_schema_creation=False,
            project=project.project_id,
            opts=pulumi.ResourceOptions(
                parent=self,
                depends_on=self.enabled_apis,
                ignore_changes=["advancedSiteSearchConfig"],
            ),
        )

        self.target_site = gcp.discoveryengine.TargetSite(
            "uverworld-target-site",
            location=self.data_store.location,
            data_store_id=self.data_store.data_store_id,
            provided_uri_pattern=site_pattern,
            type="INCLUDE",
            exact_match=False,
            project=project.project_id,
            opts=pulumi.ResourceOptions(parent=self, depends_on=self.enabled_apis),
        )

        self.search_engine = gcp.discoveryengine.SearchEngine(
            "artist-site-search",
            engine_id="artist-site-search",
            location=self.data_store.location,
            collection_id="default_collection",
            display_name="Official Artist Site Search",
            industry_vertical="GENERIC",
            data_store_ids=[self.data_store.data_store_id],
            search_engine_config=gcp.discoveryengine.SearchEngineSearchEngineConfigArgs(
                search_tier="SEARCH_TIER_ENTERPRISE",
                search_add_ons=["SEARCH_ADD_ON_LLM"],
            ),
            project=project.project_id,
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.data_store]),
        )

        # Vertex AI service agent reads the index
        iam.bind_project_member_roles(
            [Roles.DiscoveryEngine.VIEWER],
            "vertex-ai-service-agent",
            pulumi.Output.concat(
                "serviceAccount:service-",
                project.number,
                "@gcp-sa-aiplatform.iam.gserviceaccount.com",
            ),
            parent=self,
        )

        self.register_outputs(
            {
                "data_store_id": self.data_store.data_store_id,
                "search_engine_id": self.search_engine.engine_id,
            }
        )
