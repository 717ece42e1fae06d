"""
Search Log

Append-only record of every place that has been evaluated, kept in the
"Search Log" tab of a Google Sheet. Column D holds the place ID and is what
the seen-place cache is loaded from.

Row layout: [business name, address, YYYY-MM-DD, place_id]
"""

import json
from datetime import date
from typing import Any, Dict, List, Optional

from ..config import SHEETS_SCOPES, SEARCH_LOG_ID_RANGE, SEARCH_LOG_APPEND_RANGE
from ..exceptions import ConfigurationError, PersistenceError


def build_sheets_service(
    credentials_json: Optional[str] = None,
    credentials_file: Optional[str] = None,
):
    """
    Build a Sheets v4 service from service-account credentials.

    Args:
        credentials_json: Service account key as a JSON string
        credentials_file: Path to a service account key file

    Raises:
        ConfigurationError: If neither source is given or the key is unreadable
    """
    from google.oauth2 import service_account
    from googleapiclient.discovery import build

    try:
        if credentials_json:
            info = json.loads(credentials_json)
            creds = service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
        elif credentials_file:
            creds = service_account.Credentials.from_service_account_file(credentials_file, scopes=SHEETS_SCOPES)
        else:
            raise ConfigurationError(
                "Google credentials missing: set GOOGLE_CREDENTIALS or GOOGLE_CREDENTIALS_FILE"
            )
    except (ValueError, OSError) as e:
        raise ConfigurationError(f"Invalid Google credentials: {e}")

    return build('sheets', 'v4', credentials=creds, cache_discovery=False)


class SearchLog:
    """Google Sheets backed search log.

    Args:
        service: A Sheets v4 service (see build_sheets_service)
        spreadsheet_id: ID of the spreadsheet holding the "Search Log" tab
    """

    def __init__(self, service: Any, spreadsheet_id: str):
        self._service = service
        self.spreadsheet_id = spreadsheet_id

    def read_place_ids(self) -> List[str]:
        """Bulk-read every logged place ID (column D)."""
        result = self._service.spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id,
            range=SEARCH_LOG_ID_RANGE,
        ).execute()
        rows = result.get('values', [])
        return [cell for row in rows for cell in row if cell]

    def append(self, name: str, address: str, place_id: str, logged_on: Optional[date] = None):
        """
        Append one row for an evaluated place.

        Raises:
            PersistenceError: If the append fails
        """
        if logged_on is None:
            logged_on = date.today()

        body = {'values': [[name, address or "", logged_on.isoformat(), place_id]]}
        try:
            self._service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=SEARCH_LOG_APPEND_RANGE,
                valueInputOption='USER_ENTERED',
                body=body,
            ).execute()
        except Exception as e:
            raise PersistenceError(f"Search log append failed for {place_id}: {e}") from e


class MemorySearchLog:
    """In-memory search log used for dry runs and tests."""

    def __init__(self, place_ids: Optional[List[str]] = None):
        self.rows: List[Dict[str, str]] = [
            {'name': '', 'address': '', 'date': '', 'place_id': pid} for pid in (place_ids or [])
        ]

    def read_place_ids(self) -> List[str]:
        return [row['place_id'] for row in self.rows]

    def append(self, name: str, address: str, place_id: str, logged_on: Optional[date] = None):
        if logged_on is None:
            logged_on = date.today()
        self.rows.append({
            'name': name,
            'address': address or "",
            'date': logged_on.isoformat(),
            'place_id': place_id,
        })
