"""Table name filtering applied to catalog rows before the schema model is built."""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .models import RenderOptions, TableRow


logger = logging.getLogger(__name__)


# A rule returns True (keep), False (drop) or None (not decisive).
FilterRule = Callable[[str], Optional[bool]]


@dataclass
class FilterResult:
    """Tables that survived filtering plus any pattern warnings."""
    tables: List[TableRow]
    warnings: List[str] = field(default_factory=list)


def wildcard_to_regex(pattern: str) -> str:
    """Convert a ``*``/``?`` wildcard pattern to an anchored regex.

    Args:
        pattern: Wildcard pattern such as ``*_temp`` or ``log_????``

    Returns:
        Regex source matching the whole table name
    """
    escaped = re.escape(pattern).replace(r"\*", ".*").replace(r"\?", ".")
    return f"^{escaped}$"


def matches_wildcard(table_name: str, pattern: str) -> bool:
    """Check a table name against a wildcard pattern, ignoring case.

    Every character other than ``*`` and ``?`` is escaped, so any pattern
    compiles and regex metacharacters match literally.
    """
    return re.match(wildcard_to_regex(pattern), table_name, re.IGNORECASE) is not None


def compile_patterns(patterns: Sequence[str], warnings: List[str]) -> List[re.Pattern]:
    """Compile regex patterns case-insensitively, skipping malformed ones.

    Args:
        patterns: Regex sources from the options
        warnings: Receives one message per malformed pattern

    Returns:
        Compiled patterns, in the given order
    """
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            message = f"Invalid regex pattern '{pattern}': {e}"
            logger.warning(message)
            warnings.append(message)
    return compiled


def exclude_by_name(exclude_tables: Sequence[str]) -> FilterRule:
    """Rule dropping tables whose name matches any wildcard entry."""
    def rule(table_name: str) -> Optional[bool]:
        if any(matches_wildcard(table_name, pattern) for pattern in exclude_tables):
            return False
        return None
    return rule


def exclude_by_pattern(patterns: Sequence[re.Pattern]) -> FilterRule:
    """Rule dropping tables matching any exclude regex."""
    def rule(table_name: str) -> Optional[bool]:
        if any(pattern.search(table_name) for pattern in patterns):
            return False
        return None
    return rule


def include_by_pattern(patterns: Sequence[re.Pattern]) -> FilterRule:
    """Rule keeping only tables matching at least one include regex."""
    def rule(table_name: str) -> Optional[bool]:
        return any(pattern.search(table_name) for pattern in patterns)
    return rule


def build_rules(options: RenderOptions) -> Tuple[List[FilterRule], List[str]]:
    """Build the ordered rule chain for the given options.

    Rules run in precedence order: exclude wildcard, exclude regex,
    include regex. Rules for empty option lists are left out.

    Returns:
        Tuple of (rules, warnings about malformed patterns)
    """
    warnings: List[str] = []
    rules: List[FilterRule] = []

    if options.exclude_tables:
        rules.append(exclude_by_name(options.exclude_tables))

    if options.exclude_table_patterns:
        rules.append(exclude_by_pattern(compile_patterns(options.exclude_table_patterns, warnings)))

    if options.include_table_patterns:
        # All-malformed include patterns still exclude every table
        rules.append(include_by_pattern(compile_patterns(options.include_table_patterns, warnings)))

    return rules, warnings


def should_include_table(table_name: str, rules: Sequence[FilterRule]) -> bool:
    """Run the rule chain; the first decisive rule wins, default is keep."""
    for rule in rules:
        decision = rule(table_name)
        if decision is not None:
            return decision
    return True


def filter_tables(raw_tables: Sequence[TableRow], options: RenderOptions) -> FilterResult:
    """Filter catalog tables by name and apply the table cap.

    Args:
        raw_tables: Tables in catalog order (schema, then name)
        options: Render options holding the filter settings

    Returns:
        FilterResult with surviving tables in their original order
    """
    rules, warnings = build_rules(options)

    tables = [table for table in raw_tables if should_include_table(table.name, rules)]
    logger.debug(f"Name filtering kept {len(tables)} of {len(raw_tables)} tables")

    if options.max_tables > 0 and len(tables) > options.max_tables:
        logger.info(f"Limiting diagram to the first {options.max_tables} of {len(tables)} tables")
        tables = tables[:options.max_tables]

    return FilterResult(tables=tables, warnings=warnings)
