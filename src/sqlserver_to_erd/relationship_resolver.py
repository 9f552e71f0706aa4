"""Resolution of catalog foreign keys into diagram relationships."""

import logging
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from .models import (
    ForeignKeyRow, Relationship, RelationshipType, TableSchema,
    relationship_key, table_key
)


logger = logging.getLogger(__name__)


def build_table_lookup(tables: Sequence[TableSchema]) -> Dict[tuple, TableSchema]:
    """Map case-insensitive (schema, name) keys to tables."""
    return {table.key: table for table in tables}


def infer_relationship_type(source_table: TableSchema, source_column: str) -> RelationshipType:
    """Classify a foreign key as one-to-one or one-to-many.

    A foreign key is one-to-one when the referencing table has a unique,
    non primary key index whose only member is the referencing column.
    """
    for index in source_table.indexes:
        if index.is_single_column_unique(source_column):
            return RelationshipType.ONE_TO_ONE
    return RelationshipType.ONE_TO_MANY


def is_optional_reference(source_table: TableSchema, source_column: str) -> bool:
    """Whether the referencing column allows NULL; unknown columns count as nullable."""
    column = source_table.get_column(source_column)
    if column is None:
        logger.debug(f"Column {source_column} not found in {source_table.entity_name}, treating as nullable")
        return True
    return column.is_nullable


def resolve_constraint(constraint: ForeignKeyRow,
                       lookup: Dict[tuple, TableSchema],
                       seen: FrozenSet[str]) -> Tuple[Optional[Relationship], FrozenSet[str]]:
    """Resolve one foreign-key row against the filtered tables.

    Args:
        constraint: Raw foreign-key row
        lookup: Filtered tables by case-insensitive key
        seen: Edge keys already emitted

    Returns:
        Tuple of (relationship or None when dropped, updated seen keys)
    """
    source = lookup.get(table_key(constraint.source_schema, constraint.source_table))
    target = lookup.get(table_key(constraint.target_schema, constraint.target_table))
    if source is None or target is None:
        # One of the tables was filtered out
        return None, seen

    key = relationship_key(source.entity_name, target.entity_name)
    if key in seen:
        return None, seen

    relationship = Relationship(
        constraint_name=constraint.constraint_name,
        source_schema=source.schema_name,
        source_table=source.name,
        source_column=constraint.source_column,
        target_schema=target.schema_name,
        target_table=target.name,
        target_column=constraint.target_column,
        source_entity=source.entity_name,
        target_entity=target.entity_name,
        relationship_type=infer_relationship_type(source, constraint.source_column),
        is_optional=is_optional_reference(source, constraint.source_column),
    )
    return relationship, seen | {key}


def resolve_relationships(raw_constraints: Sequence[ForeignKeyRow],
                          tables: Sequence[TableSchema]) -> List[Relationship]:
    """Turn foreign-key rows into deduplicated, typed relationships.

    Constraints referencing a table that is not in ``tables`` are dropped.
    Constraints rendering to an already emitted source/target entity pair
    are dropped too, so composite keys yield a single edge.

    Args:
        raw_constraints: Foreign-key rows, one per column pair
        tables: Filtered tables of the schema model

    Returns:
        Relationships in first-seen order
    """
    lookup = build_table_lookup(tables)
    seen: FrozenSet[str] = frozenset()
    relationships = []

    for constraint in raw_constraints:
        relationship, seen = resolve_constraint(constraint, lookup, seen)
        if relationship is not None:
            relationships.append(relationship)

    logger.info(f"Resolved {len(relationships)} relationships from {len(raw_constraints)} foreign key columns")
    return relationships
