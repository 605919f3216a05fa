from __future__ import annotations

from typing import List, Sequence

from pingbot.clients.google_sheets import SheetsClient


class SubscriberStore:
    """Persists subscribed user ids to one column of a spreadsheet tab."""

    def __init__(self, sheets: SheetsClient, sheet_id: str, sheet_name: str = "Subscribers"):
        self.sheets = sheets
        self.sheet_id = sheet_id
        self.sheet_name = sheet_name

    def _range(self) -> str:
        return f"{self.sheet_name}!A:A"

    def load(self) -> List[str]:
        rows = self.sheets.read_range(self.sheet_id, self._range())
        user_ids: List[str] = []
        for row in rows:
            if not row:
                continue
            user_id = str(row[0]).strip()
            if user_id and user_id not in user_ids:
                user_ids.append(user_id)
        return user_ids

    def save(self, user_ids: Sequence[str]) -> None:
        self.sheets.clear_range(self.sheet_id, self._range())
        if user_ids:
            self.sheets.update_rows(self.sheet_id, self._range(), [[user_id] for user_id in user_ids])
