"""
Lead Store

Writes admitted leads to an Airtable table over the Airtable REST API.
Before every insert the table is checked for a record with the same
business name, which guards against duplicates created by earlier runs.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

import httpx

from ..config import AIRTABLE_API_URL, AIRTABLE_FIELDS, STORAGE_TIMEOUT
from ..exceptions import PersistenceError
from ..models import Lead

logger = logging.getLogger(__name__)


def build_name_formula(business_name: str) -> str:
    """Build an exact-match filterByFormula for the Business Name column."""
    escaped = business_name.replace('\\', '\\\\').replace('"', '\\"')
    return f'{{{AIRTABLE_FIELDS["business_name"]}}} = "{escaped}"'


def lead_to_fields(lead: Lead) -> Dict[str, str]:
    """Map a Lead onto Airtable column names."""
    return {column: getattr(lead, attr) for attr, column in AIRTABLE_FIELDS.items()}


class AirtableLeadStore:
    """Airtable-backed lead store.

    Args:
        api_key: Airtable personal access token
        base_id: Airtable base ID
        table_name: Table that receives leads
        client: Optional httpx client to reuse
        timeout: Request timeout in seconds when no client is given
    """

    def __init__(
        self,
        api_key: str,
        base_id: str,
        table_name: str,
        client: Optional[httpx.Client] = None,
        timeout: float = STORAGE_TIMEOUT,
    ):
        self.table_url = f"{AIRTABLE_API_URL}/{base_id}/{quote(table_name, safe='')}"
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None
        self._headers = {'Authorization': f"Bearer {api_key}"}

    def close(self):
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def exists(self, business_name: str) -> bool:
        """Check whether a record with this exact business name exists.

        A failed check is reported as "not found" so the insert still happens.
        """
        params = {
            'filterByFormula': build_name_formula(business_name),
            'maxRecords': '1',
        }
        try:
            response = self._client.get(self.table_url, params=params, headers=self._headers)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error checking duplicates for %r: %s", business_name, e)
            return False

        records = payload.get('records') if isinstance(payload, dict) else None
        if not isinstance(records, list):
            logger.error("Unexpected duplicate check response for %r: %.200s", business_name, response.text)
            return False
        return len(records) > 0

    def add(self, lead: Lead) -> bool:
        """
        Insert a lead unless its business name is already present.

        Returns:
            True if a record was created, False if it was a duplicate

        Raises:
            PersistenceError: If the insert fails
        """
        if self.exists(lead.business_name):
            return False

        payload = {'records': [{'fields': lead_to_fields(lead)}]}
        try:
            response = self._client.post(self.table_url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise PersistenceError(f"Airtable insert failed for {lead.business_name!r}: {e}") from e

        if response.status_code != 200:
            raise PersistenceError(
                f"Airtable insert failed for {lead.business_name!r}: "
                f"{response.status_code} - {response.text[:200]}"
            )
        try:
            created = response.json()
        except ValueError as e:
            raise PersistenceError(f"Airtable insert for {lead.business_name!r} returned invalid JSON: {e}") from e
        if not isinstance(created, dict) or not isinstance(created.get('records'), list):
            raise PersistenceError(
                f"Airtable insert for {lead.business_name!r} returned an unexpected body: {response.text[:200]}"
            )
        return True


class MemoryLeadStore:
    """In-memory lead store used for dry runs and tests."""

    def __init__(self):
        self.leads: List[Lead] = []

    def exists(self, business_name: str) -> bool:
        return any(lead.business_name == business_name for lead in self.leads)

    def add(self, lead: Lead) -> bool:
        if self.exists(lead.business_name):
            return False
        self.leads.append(lead)
        return True
