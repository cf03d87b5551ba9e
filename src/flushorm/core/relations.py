"""
Foreign key columns.

A :class:`ForeignKey` stores the referenced row's identifier. Without an
explicit ``db_type`` the column takes the type of the referenced key. Related
objects are never loaded or persisted through it; the application persists
each side itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Type

from .fields import Field

if TYPE_CHECKING:
    from .entity import Entity


class ForeignKey(Field):
    python_type = int

    def __init__(
        self,
        to: Type["Entity"] | str,
        *,
        on_delete: str = "RESTRICT",
        db_type: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("nullable", False)
        super().__init__(db_type=db_type, **kwargs)
        self.to = to
        self.on_delete = on_delete

    def __set__(self, instance: object, value: Any) -> None:
        if value is not None and hasattr(value, "_meta") and hasattr(value, "pk"):
            value = value.pk
        super().__set__(instance, value)

    def target_name(self) -> str:
        """
        Entity name of the referenced type.
        """
        if isinstance(self.to, str):
            return self.to.split(".")[-1]
        return self.to._meta.entity_name
