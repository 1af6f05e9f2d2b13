"""OIDC application and login policy for the web frontend."""

import pulumi
import pulumiverse_zitadel as zitadel

LOCAL_ORIGIN = "http://localhost:9000"


def frontend_domain(environment: str, app_domain: str, apex: bool) -> str:
    return app_domain if apex else f"{environment}.{app_domain}"


class FrontendComponent(pulumi.ComponentResource):
    """Browser SPA login through Zitadel.

    Creates:
    - OIDC application ``web-frontend`` (PKCE, JWT access tokens)
    - Organization login policy (passkeys and external IdPs, no passwords)
    """

    def __init__(
        self,
        name: str,
        org_id: pulumi.Input[str],
        project_id: pulumi.Input[str],
        domain: str,
        dev_mode: bool,
        provider: zitadel.Provider,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("liverty-music:zitadel:Frontend", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self, provider=provider)

        redirect_uris = [f"https://{domain}/auth/callback"]
        post_logout_redirect_uris = [f"https://{domain}/signedout"]
        if dev_mode:
            redirect_uris.append(f"{LOCAL_ORIGIN}/auth/callback")
            post_logout_redirect_uris.append(f"{LOCAL_ORIGIN}/signedout")

        self.application = zitadel.ApplicationOidc(
            "web-frontend",
            project_id=project_id,
            name="web-frontend",
            org_id=org_id,
            # JWT access tokens can be validated statelessly by the backend
            access_token_type="OIDC_TOKEN_TYPE_JWT",
            app_type="OIDC_APP_TYPE_USER_AGENT",
            # Public client: PKCE, no client secret
            auth_method_type="OIDC_AUTH_METHOD_TYPE_NONE",
            grant_types=[
                "OIDC_GRANT_TYPE_AUTHORIZATION_CODE",
                "OIDC_GRANT_TYPE_REFRESH_TOKEN",
            ],
            response_types=["OIDC_RESPONSE_TYPE_CODE"],
            id_token_role_assertion=True,
            id_token_userinfo_assertion=True,
            clock_skew="0s",
            redirect_uris=redirect_uris,
            post_logout_redirect_uris=post_logout_redirect_uris,
            # Allows http://localhost
            dev_mode=dev_mode,
            opts=child_opts,
        )

        self.login_policy = zitadel.LoginPolicy(
            "default",
            org_id=org_id,
            # Password login disabled
            user_login=False,
            allow_register=True,
            allow_external_idp=True,
            force_mfa=False,
            force_mfa_local_only=False,
            passwordless_type="PASSWORDLESS_TYPE_ALLOWED",
            hide_password_reset=True,
            ignore_unknown_usernames=True,
            default_redirect_uri=f"https://{domain}",
            password_check_lifetime="240h0m0s",
            external_login_check_lifetime="240h0m0s",
            multi_factor_check_lifetime="24h0m0s",
            mfa_init_skip_lifetime="720h0m0s",
            second_factor_check_lifetime="24h0m0s",
            opts=child_opts,
        )

        self.client_id = self.application.client_id

        self.register_outputs(
            {
                "application_id": self.application.id,
                "client_id": self.client_id,
            }
        )
