"""Import marker value object."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from cardsync.domain.shared.time import format_iso_timestamp

IMPORT_TAG_PREFIX = "importedAt:"


class ImportMarker(BaseModel):
    """Ledger tag shared by every transaction inserted in one sync run."""

    tag_name: str
    tag_id: int

    model_config = ConfigDict(frozen=True)

    @staticmethod
    def tag_name_for(started_at: datetime) -> str:
        return f"{IMPORT_TAG_PREFIX}{format_iso_timestamp(started_at)}"
