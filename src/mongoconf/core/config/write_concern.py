"""Write concern sub-config for the output registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .errors import InvalidValueError

W_PROPERTY = "writeconcern.w"
JOURNAL_PROPERTY = "writeconcern.journal"
WTIMEOUT_PROPERTY = "writeconcern.wtimeoutms"


@dataclass(frozen=True)
class WriteConcernConfig:
    """Unset fields are left to the server default."""

    w: Optional[Union[int, str]] = None
    journal: Optional[bool] = None
    wtimeout_ms: Optional[int] = None

    @property
    def is_server_default(self) -> bool:
        return self.w is None and self.journal is None and self.wtimeout_ms is None

    @property
    def acknowledged(self) -> bool:
        return self.w != 0

    def to_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {}
        if self.w is not None:
            document["w"] = self.w
        if self.journal is not None:
            document["j"] = self.journal
        if self.wtimeout_ms is not None:
            document["wtimeout"] = self.wtimeout_ms
        return document


def build_write_concern(values: Mapping[str, Any]) -> WriteConcernConfig:
    w = values.get(W_PROPERTY)
    journal = values.get(JOURNAL_PROPERTY)
    if w == 0 and journal:
        raise InvalidValueError(
            JOURNAL_PROPERTY, journal, "journaling cannot be requested for an unacknowledged write concern (w=0)"
        )
    return WriteConcernConfig(w=w, journal=journal, wtimeout_ms=values.get(WTIMEOUT_PROPERTY))
