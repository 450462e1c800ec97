"""
Team Storage Module.

JSON-file backed team roster store, keyed by team name.
"""

from pathlib import Path
from typing import Optional

from storage.base import TeamStore
from storage.json_document import JsonDocument
from storage.models import Team


class JsonTeamStore(TeamStore):
    """Team rosters persisted as `teams.json` under the data directory."""

    def __init__(self, data_dir: str, file_name: str = "teams.json"):
        self.document = JsonDocument(Path(data_dir) / file_name)

    def get_team(self, name: str) -> Optional[Team]:
        item = self.document.read().get(name)
        return Team.model_validate(item) if item else None

    def save_team(self, team: Team) -> None:
        with self.document.transaction() as data:
            data[team.name] = team.model_dump(mode="json")
