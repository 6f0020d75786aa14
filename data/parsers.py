"""
Parser for the marketing dataset JSON payload.
"""

import json
import logging
from typing import Any, Dict, Mapping

from models.data_models import Campaign, MarketingData

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class MarketingDataParser:
    """
    Parser for the pre-aggregated campaign dataset.

    Validates the top-level shape of the payload and converts each campaign
    into typed records. Missing breakdown arrays are treated as empty.
    """

    def __init__(self):
        self.last_summary: Dict[str, int] = {}

    def parse_text(self, text: str) -> MarketingData:
        """
        Decode JSON text and parse it.

        Raises:
            ValueError: If the text is not valid JSON or the payload is malformed
        """
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in marketing data: {str(e)}")
            raise ValueError(f"Invalid JSON in marketing data: {e.msg} (line {e.lineno})") from e
        return self.parse_payload(payload)

    def parse_payload(self, payload: Any) -> MarketingData:
        """
        Convert a decoded payload into MarketingData.

        Args:
            payload: Decoded JSON object with a ``campaigns`` list

        Returns:
            MarketingData with typed campaigns and untouched extra fields

        Raises:
            ValueError: If the payload is not an object with a campaigns list
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Malformed marketing data: expected a JSON object at the top level")

        raw_campaigns = payload.get("campaigns")
        if not isinstance(raw_campaigns, list):
            raise ValueError("Malformed marketing data: 'campaigns' must be a list")

        campaigns = []
        for index, row in enumerate(raw_campaigns):
            if not isinstance(row, Mapping):
                raise ValueError(f"Malformed marketing data: campaign #{index} is not an object")
            try:
                campaigns.append(Campaign.from_dict(row))
            except (AttributeError, TypeError) as e:
                raise ValueError(f"Malformed marketing data: campaign #{index} has invalid breakdowns ({str(e)})") from e

        extras = {key: value for key, value in payload.items() if key != "campaigns"}
        data = MarketingData(campaigns=tuple(campaigns), extras=extras)

        self.last_summary = self.summarize(data)
        logger.info(
            f"Parsed {self.last_summary['campaigns']} campaigns "
            f"({self.last_summary['demographic_slices']} demographic, "
            f"{self.last_summary['device_slices']} device, "
            f"{self.last_summary['region_slices']} regional, "
            f"{self.last_summary['week_slices']} weekly slices)"
        )
        return data

    @staticmethod
    def summarize(data: MarketingData) -> Dict[str, int]:
        """Count campaigns and slices per breakdown."""
        return {
            'campaigns': len(data.campaigns),
            'demographic_slices': sum(len(c.demographic_breakdown) for c in data.campaigns),
            'device_slices': sum(len(c.device_performance) for c in data.campaigns),
            'region_slices': sum(len(c.regional_performance) for c in data.campaigns),
            'week_slices': sum(len(c.weekly_performance) for c in data.campaigns),
        }
