"""Built-in concepts: entities, their properties and a few common features."""
from __future__ import annotations

from dataclasses import dataclass

from rhlsp.dsl.concepts import ConceptInfo, key_field


# ---------------------------------------------------------------------------
# Root concepts
# ---------------------------------------------------------------------------

@dataclass
class EntityInfo(ConceptInfo):
    """A data structure persisted in its own database table.

    Properties and features of the entity are declared inside its block.
    """
    keyword = 'Entity'
    name: str | None = key_field()


@dataclass
class BrowseInfo(ConceptInfo):
    """A read-only view that selects data from an entity and its references."""
    keyword = 'Browse'
    name: str | None = key_field()
    source: EntityInfo | None = None


@dataclass
class BrowseTakeInfo(ConceptInfo):
    """Adds a property to the browse, given as a path from the source entity."""
    keyword = 'Take'
    browse: BrowseInfo | None = key_field()
    path: str | None = key_field()


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

@dataclass
class PropertyInfo(ConceptInfo):
    entity: EntityInfo | None = key_field()
    name: str | None = key_field()


@dataclass
class ShortStringPropertyInfo(PropertyInfo):
    """A text property limited to 256 characters."""
    keyword = 'ShortString'


@dataclass
class LongStringPropertyInfo(PropertyInfo):
    """A text property of unlimited length."""
    keyword = 'LongString'


@dataclass
class IntegerPropertyInfo(PropertyInfo):
    """A 32-bit integer property."""
    keyword = 'Integer'


@dataclass
class DecimalPropertyInfo(PropertyInfo):
    """A decimal number property with 10 decimal places."""
    keyword = 'Decimal'


@dataclass
class BoolPropertyInfo(PropertyInfo):
    """A true/false property."""
    keyword = 'Bool'


@dataclass
class DateTimePropertyInfo(PropertyInfo):
    keyword = 'DateTime'


@dataclass
class ReferencePropertyInfo(PropertyInfo):
    """A reference to a record of another entity."""
    keyword = 'Reference'
    referenced: EntityInfo | None = None


@dataclass
class SimpleReferencePropertyInfo(PropertyInfo):
    """A reference to the entity with the same name as the property."""
    keyword = 'Reference'


# ---------------------------------------------------------------------------
# Property rules
# ---------------------------------------------------------------------------

@dataclass
class RequiredPropertyInfo(ConceptInfo):
    """The property value must be entered."""
    keyword = 'Required'
    property: PropertyInfo | None = key_field()


@dataclass
class MaxLengthInfo(ConceptInfo):
    """Limits the length of a text property."""
    keyword = 'MaxLength'
    property: PropertyInfo | None = key_field()
    length: str | None = None


@dataclass
class DefaultValueInfo(ConceptInfo):
    """Sets the property value on insert when none was given."""
    keyword = 'DefaultValue'
    property: PropertyInfo | None = key_field()
    expression: str | None = None


@dataclass
class UniquePropertyInfo(ConceptInfo):
    """No two records may have the same value of the property."""
    keyword = 'Unique'
    property: PropertyInfo | None = key_field()


# ---------------------------------------------------------------------------
# Entity features
# ---------------------------------------------------------------------------

@dataclass
class UniqueMultiplePropertiesInfo(ConceptInfo):
    """No two records may have the same combination of the listed properties."""
    keyword = 'Unique'
    entity: EntityInfo | None = key_field()
    property_names: str | None = None


@dataclass
class EntityLoggingInfo(ConceptInfo):
    """Logs every insert, update and delete on the entity."""
    keyword = 'Logging'
    entity: EntityInfo | None = key_field()


@dataclass
class DeactivatableInfo(ConceptInfo):
    """Records are deactivated instead of deleted."""
    keyword = 'Deactivatable'
    entity: EntityInfo | None = key_field()


@dataclass
class ItemFilterInfo(ConceptInfo):
    """A named filter selecting records by a lambda expression."""
    keyword = 'ItemFilter'
    entity: EntityInfo | None = key_field()
    filter_name: str | None = key_field()
    expression: str | None = None
