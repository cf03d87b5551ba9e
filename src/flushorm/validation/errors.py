"""
Validation error raised before entity writes.
"""

from __future__ import annotations

from typing import Dict, List, Mapping


class ValidationError(ValueError):
    """
    Aggregated validation failure mapping field names to messages. Entity-wide
    messages are stored under ``"__all__"``.
    """

    def __init__(self, errors: Mapping[str, List[str]]) -> None:
        self.errors: Dict[str, List[str]] = {
            key: list(messages) for key, messages in errors.items()
        }
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        segments = []
        for field, messages in self.errors.items():
            prefix = field if field != "__all__" else "entity"
            segments.append(f"{prefix}: {'; '.join(messages)}")
        return "; ".join(segments)
