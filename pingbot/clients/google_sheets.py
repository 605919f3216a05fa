from __future__ import annotations

import logging
from typing import Any, List

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError


logger = logging.getLogger(__name__)


class SheetsClient:
    def __init__(self, *, client_id: str, client_secret: str, refresh_token: str, token_uri: str, scopes: str):
        creds = Credentials(
            None,
            refresh_token=refresh_token,
            token_uri=token_uri,
            client_id=client_id,
            client_secret=client_secret,
            scopes=scopes.split(),
        )
        self.service = build("sheets", "v4", credentials=creds, cache_discovery=False)

    def read_range(self, spreadsheet_id: str, range_name: str) -> List[List[Any]]:
        try:
            result = self.service.spreadsheets().values().get(spreadsheetId=spreadsheet_id, range=range_name).execute()
            return result.get("values", [])
        except HttpError as exc:
            logger.error("Failed to read range %s: %s", range_name, exc)
            raise

    def clear_range(self, spreadsheet_id: str, range_name: str) -> None:
        try:
            self.service.spreadsheets().values().clear(spreadsheetId=spreadsheet_id, range=range_name, body={}).execute()
        except HttpError as exc:
            logger.error("Failed to clear range %s: %s", range_name, exc)
            raise

    def update_rows(self, spreadsheet_id: str, range_name: str, values: List[List[Any]]) -> None:
        try:
            self.service.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=range_name,
                valueInputOption="RAW",
                body={"values": values},
            ).execute()
        except HttpError as exc:
            logger.error("Failed to update rows in %s: %s", range_name, exc)
            raise
