"""
Connector registry — maps a provider id to its connector.
"""

import httpx

from config.settings import Settings
from models.enums import Provider
from sources.base import SourceConnector
from sources.greenhouse import GreenhouseConnector
from sources.lever import LeverConnector
from tools.api_fetcher import AtsFetcher
from tools.errors import ValidationFailed
from tools.telemetry import Telemetry


def build_connectors(
    settings: Settings,
    client: httpx.AsyncClient,
    telemetry: Telemetry,
) -> dict[Provider, SourceConnector]:
    """One connector per supported provider, sharing the HTTP client."""
    return {
        Provider.GREENHOUSE: GreenhouseConnector(
            AtsFetcher(Provider.GREENHOUSE.value, settings.greenhouse_url, client, telemetry, settings.request_timeout)
        ),
        Provider.LEVER: LeverConnector(
            AtsFetcher(Provider.LEVER.value, settings.lever_url, client, telemetry, settings.request_timeout)
        ),
    }


def get_connector(connectors: dict[Provider, SourceConnector], provider: Provider | str) -> SourceConnector:
    try:
        return connectors[Provider(provider)]
    except (KeyError, ValueError) as e:
        raise ValidationFailed(f"Unsupported provider: {provider}", e) from e
