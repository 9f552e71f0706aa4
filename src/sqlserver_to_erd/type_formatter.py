"""Display formatting for SQL Server column data types."""

from .models import ColumnInfo


CHARACTER_TYPES = {"VARCHAR", "NVARCHAR", "CHAR", "NCHAR"}
EXACT_NUMERIC_TYPES = {"DECIMAL", "NUMERIC"}
APPROXIMATE_NUMERIC_TYPES = {"FLOAT"}

MAX_LENGTH = -1


def format_data_type(column: ColumnInfo) -> str:
    """Format a column's data type for display.

    Args:
        column: Column info

    Returns:
        Upper-cased type name with length, precision or scale where known,
        e.g. ``NVARCHAR(50)``, ``VARCHAR(MAX)``, ``DECIMAL(10,2)``
    """
    data_type = column.data_type.upper()

    if data_type in CHARACTER_TYPES and column.max_length is not None:
        length = "MAX" if column.max_length == MAX_LENGTH else str(column.max_length)
        return f"{data_type}({length})"

    if data_type in EXACT_NUMERIC_TYPES:
        if column.numeric_precision is not None and column.numeric_scale is not None:
            return f"{data_type}({column.numeric_precision},{column.numeric_scale})"
        if column.precision is not None and column.scale is not None:
            return f"{data_type}({column.precision},{column.scale})"

    if data_type in APPROXIMATE_NUMERIC_TYPES:
        if column.numeric_precision is not None:
            return f"{data_type}({column.numeric_precision})"
        if column.precision is not None:
            return f"{data_type}({column.precision})"

    return data_type
