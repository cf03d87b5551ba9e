"""
Entities for the FlushORM membership example.
"""

from __future__ import annotations

from flushorm.core import BooleanField, DateField, Entity, ForeignKey, IntegerField, StringField
from flushorm.metadata import MetadataRegistry
from flushorm.validation import RegexValidator, ValidationError

registry = MetadataRegistry()


class Household(Entity):
    name = StringField(nullable=False, unique=True, max_length=120)


class Member(Entity):
    id = IntegerField(primary_key=True)
    name = StringField(nullable=False, max_length=120)
    email = StringField(nullable=True, validators=[RegexValidator(r"[^@\s]+@[^@\s]+")])
    active = BooleanField(default=True)
    joined = DateField(nullable=True)
    household = ForeignKey(Household, db_column="household_id", nullable=True, on_delete="SET NULL")

    def clean(self):
        if not self.active and self.household is not None:
            raise ValidationError({"household": ["Inactive members cannot belong to a household."]})
