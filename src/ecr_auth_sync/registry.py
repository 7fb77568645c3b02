"""Amazon ECR credential provider.

This module requests short-lived registry credentials through the ECR
GetAuthorizationToken API.
"""

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from icecream import ic

from ecr_auth_sync.exceptions import ProviderError
from ecr_auth_sync.models import RegistryCredential


class EcrCredentialProvider:
    """Fetches authorization tokens for an ECR registry.

    Attributes:
        region: AWS region of the registry.
        registry_id: Optional AWS account id the token is scoped to.
        client: The boto3 ECR client.

    """

    def __init__(self, region: str, *, registry_id: str | None = None, client: Any = None) -> None:
        """Initialize EcrCredentialProvider.

        Args:
            region: AWS region of the registry.
            registry_id: AWS account id to scope the token to. The account
                of the calling credentials is used when omitted.
            client: Pre-built ECR client. A client for ``region`` is created
                from the default credential chain if omitted.

        """
        self.region: str = region
        self.registry_id: str | None = registry_id
        if client is None:
            session = boto3.session.Session(region_name=region)
            client = session.client("ecr")
        self.client = client

    def get_authorization(self) -> list[RegistryCredential]:
        """Request a fresh authorization token.

        Returns:
            The authorization records from the response, possibly empty.

        Raises:
            ProviderError: If the request fails.

        """
        request: dict[str, Any] = {}
        if self.registry_id:
            request["registryIds"] = [self.registry_id]
        ic(self.region, request)

        try:
            response = self.client.get_authorization_token(**request)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            raise ProviderError(f"ECR GetAuthorizationToken failed in {self.region} ({code}): {e}") from e
        except BotoCoreError as e:
            raise ProviderError(f"ECR GetAuthorizationToken failed in {self.region}: {e}") from e

        return [
            RegistryCredential(
                endpoint=data.get("proxyEndpoint", ""),
                token=data.get("authorizationToken", ""),
                expires_at=data.get("expiresAt"),
            )
            for data in response.get("authorizationData", [])
        ]

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"EcrCredentialProvider(region={self.region!r}, registry_id={self.registry_id!r})"
