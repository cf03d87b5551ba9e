"""
Top-level configuration for building a session factory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from .adapters.base import AdapterConfigurationError, ConnectionConfig

DEFAULT_URL_ENV = "FLUSHORM_DATABASE_URL"


@dataclass
class PersistenceConfiguration:
    """
    Everything a :class:`~flushorm.persistence.SessionFactory` needs: the
    database DSN, the entity classes to map and execution options.
    """

    url: str
    entity_classes: Sequence[type] = ()
    slow_query_ms: Optional[int] = None
    options: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise AdapterConfigurationError("Database URL must not be blank")
        self.entity_classes = tuple(self.entity_classes)

    @classmethod
    def from_env(
        cls,
        env_var: str = DEFAULT_URL_ENV,
        *,
        entity_classes: Sequence[type] = (),
        **kwargs: Any,
    ) -> "PersistenceConfiguration":
        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls(url=value, entity_classes=entity_classes, source=env_var, **kwargs)

    def connection_config(self) -> ConnectionConfig:
        return ConnectionConfig.from_url(self.url, options=self.options, source=self.source)
