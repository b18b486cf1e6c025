"""
DNS record endpoints.

The same endpoints serve both the per-user and the admin listings; the
backend decides which records a caller may see and change.
"""

import logging
from typing import Dict, Optional

from ..core.models import DNSRecord, Page
from .client import ApiClient, parse_json

logger = logging.getLogger(__name__)

TOTAL_COUNT_HEADER = "X-Total-Count"


class DNSRecordsAPI:
    """Client for ``/dns-records`` endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    def list(self, page: int, page_size: int, search: Optional[str] = None) -> Page:
        """Fetch one page of records and the total count."""
        params = {"page": page, "pageSize": page_size}
        if search:
            params["search"] = search

        response = self.client.get("/dns-records", params=params)
        records = [DNSRecord.from_api(item) for item in parse_json(response, list)]

        try:
            total_count = int(response.headers.get(TOTAL_COUNT_HEADER) or 0)
        except ValueError:
            logger.warning(
                f"Ignoring malformed {TOTAL_COUNT_HEADER}: "
                f"{response.headers.get(TOTAL_COUNT_HEADER)}"
            )
            total_count = 0

        logger.info(f"Retrieved {len(records)} of {total_count} DNS records")
        return Page(items=records, total_count=total_count)

    def get(self, record_id: int) -> DNSRecord:
        response = self.client.get(f"/dns-records/{record_id}")
        return DNSRecord.from_api(parse_json(response))

    def create(self, payload: Dict[str, str]) -> DNSRecord:
        response = self.client.post("/dns-records", json=payload)
        record = DNSRecord.from_api(parse_json(response))
        logger.info(f"Created record {record.domain_name} -> {record.value}")
        return record

    def update(self, record_id: int, payload: Dict[str, str]) -> DNSRecord:
        response = self.client.put(f"/dns-records/{record_id}", json=payload)
        record = DNSRecord.from_api(parse_json(response))
        logger.info(f"Updated record {record_id}")
        return record

    def delete(self, record_id: int) -> None:
        self.client.delete(f"/dns-records/{record_id}")
        logger.info(f"Deleted record {record_id}")
