"""SQL Server catalog connector for extracting schema information."""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import bindparam, create_engine, text
from sqlalchemy.engine import Connection, Engine, URL
from sqlalchemy.exc import SQLAlchemyError

from .models import CatalogSnapshot, ColumnRow, ForeignKeyRow, IndexRow, RenderOptions, TableRow


logger = logging.getLogger(__name__)


TABLES_SQL = """
    SELECT
        t.TABLE_SCHEMA AS schema_name,
        t.TABLE_NAME AS table_name,
        t.TABLE_TYPE AS table_type,
        CAST(ep.value AS NVARCHAR(4000)) AS description
    FROM INFORMATION_SCHEMA.TABLES t
    LEFT JOIN sys.extended_properties ep
        ON ep.class = 1
        AND ep.major_id = OBJECT_ID(QUOTENAME(t.TABLE_SCHEMA) + '.' + QUOTENAME(t.TABLE_NAME))
        AND ep.minor_id = 0
        AND ep.name = 'MS_Description'
    WHERE t.TABLE_TYPE = 'BASE TABLE'"""

COLUMNS_SQL = """
    SELECT
        c.COLUMN_NAME AS column_name,
        c.DATA_TYPE AS data_type,
        c.IS_NULLABLE AS is_nullable,
        c.COLUMN_DEFAULT AS default_value,
        c.CHARACTER_MAXIMUM_LENGTH AS max_length,
        c.NUMERIC_PRECISION AS numeric_precision,
        c.NUMERIC_SCALE AS numeric_scale,
        CASE WHEN pk.COLUMN_NAME IS NOT NULL THEN 1 ELSE 0 END AS is_primary_key,
        COLUMNPROPERTY(OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + QUOTENAME(c.TABLE_NAME)),
                       c.COLUMN_NAME, 'IsIdentity') AS is_identity,
        CAST(ep.value AS NVARCHAR(4000)) AS description,
        c.ORDINAL_POSITION AS ordinal_position
    FROM INFORMATION_SCHEMA.COLUMNS c
    LEFT JOIN (
        SELECT ku.TABLE_SCHEMA, ku.TABLE_NAME, ku.COLUMN_NAME
        FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
        INNER JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
            ON tc.CONSTRAINT_TYPE = 'PRIMARY KEY'
            AND tc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
            AND tc.TABLE_SCHEMA = ku.TABLE_SCHEMA
            AND tc.TABLE_NAME = ku.TABLE_NAME
    ) pk ON c.TABLE_SCHEMA = pk.TABLE_SCHEMA
        AND c.TABLE_NAME = pk.TABLE_NAME
        AND c.COLUMN_NAME = pk.COLUMN_NAME
    LEFT JOIN sys.extended_properties ep
        ON ep.class = 1
        AND ep.major_id = OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + QUOTENAME(c.TABLE_NAME))
        AND ep.minor_id = COLUMNPROPERTY(OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + QUOTENAME(c.TABLE_NAME)),
                                         c.COLUMN_NAME, 'ColumnId')
        AND ep.name = 'MS_Description'
    WHERE c.TABLE_SCHEMA = :schema_name AND c.TABLE_NAME = :table_name
    ORDER BY c.ORDINAL_POSITION"""

INDEXES_SQL = """
    SELECT
        i.name AS index_name,
        i.type_desc AS index_type,
        i.is_unique AS is_unique,
        i.is_primary_key AS is_primary_key,
        c.name AS column_name
    FROM sys.indexes i
    INNER JOIN sys.index_columns ic ON i.object_id = ic.object_id AND i.index_id = ic.index_id
    INNER JOIN sys.columns c ON ic.object_id = c.object_id AND ic.column_id = c.column_id
    INNER JOIN sys.tables t ON i.object_id = t.object_id
    INNER JOIN sys.schemas s ON t.schema_id = s.schema_id
    WHERE s.name = :schema_name AND t.name = :table_name AND ic.is_included_column = 0
    ORDER BY i.name, ic.key_ordinal"""

FOREIGN_KEYS_SQL = """
    SELECT
        fk.name AS constraint_name,
        ss.name AS source_schema,
        st.name AS source_table,
        sc.name AS source_column,
        ts.name AS target_schema,
        tt.name AS target_table,
        tc.name AS target_column
    FROM sys.foreign_keys fk
    INNER JOIN sys.foreign_key_columns fkc ON fkc.constraint_object_id = fk.object_id
    INNER JOIN sys.tables st ON st.object_id = fkc.parent_object_id
    INNER JOIN sys.schemas ss ON ss.schema_id = st.schema_id
    INNER JOIN sys.columns sc ON sc.object_id = fkc.parent_object_id AND sc.column_id = fkc.parent_column_id
    INNER JOIN sys.tables tt ON tt.object_id = fkc.referenced_object_id
    INNER JOIN sys.schemas ts ON ts.schema_id = tt.schema_id
    INNER JOIN sys.columns tc ON tc.object_id = fkc.referenced_object_id AND tc.column_id = fkc.referenced_column_id
    ORDER BY ss.name, st.name, sc.name"""


def build_engine_url(connection_string: str):
    """Turn a connection string into something ``create_engine`` accepts.

    SQLAlchemy URLs (``mssql+pyodbc://...``) are used as given; anything else
    is treated as an ODBC connection string.
    """
    if "://" in connection_string:
        return connection_string
    return URL.create("mssql+pyodbc", query={"odbc_connect": connection_string})


class CatalogConnector:
    """Connector reading table, column, index and foreign key metadata."""

    def __init__(self, connection_string: str):
        """Initialize catalog connector.

        Args:
            connection_string: SQLAlchemy URL or ODBC connection string
        """
        self.connection_string = connection_string
        self.engine: Optional[Engine] = None

    def connect(self) -> None:
        """Create the SQLAlchemy engine.

        Raises:
            SQLAlchemyError: If the engine cannot be created
        """
        try:
            self.engine = create_engine(build_engine_url(self.connection_string), pool_pre_ping=True)
            logger.info("Created database engine")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create database engine: {e}")
            raise

    def test_connection(self) -> bool:
        """Check that the database answers a trivial query."""
        try:
            with self._require_engine().connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Connection test failed: {e}")
            return False

    def get_snapshot(self, options: RenderOptions) -> CatalogSnapshot:
        """Read everything needed to build the diagram.

        Args:
            options: Render options; schema filters are applied in SQL

        Returns:
            CatalogSnapshot with tables in (schema, name) order
        """
        try:
            with self._require_engine().connect() as conn:
                database_name = conn.execute(text("SELECT DB_NAME()")).scalar() or ""
                logger.info(f"Connected to database: {database_name}")

                tables = self.list_tables(conn, options)
                # Column FK flags are set whether or not relationships are drawn
                all_foreign_keys = self.get_foreign_keys(conn)
                fk_targets = {
                    (fk.source_schema, fk.source_table, fk.source_column): fk for fk in all_foreign_keys
                }
                foreign_keys = all_foreign_keys if options.include_relationships else []

                columns: List[ColumnRow] = []
                indexes: List[IndexRow] = []
                for table in tables:
                    columns.extend(self.get_columns(conn, table, fk_targets))
                    # Unique indexes drive one-to-one detection
                    if options.include_indexes or options.include_relationships:
                        indexes.extend(self.get_indexes(conn, table))

        except SQLAlchemyError as e:
            logger.error(f"Error extracting database schema: {e}")
            raise

        logger.info(f"Extracted catalog for {len(tables)} tables and {len(foreign_keys)} foreign key columns")
        return CatalogSnapshot(
            database_name=database_name,
            tables=tables,
            columns=columns,
            indexes=indexes,
            foreign_keys=foreign_keys,
        )

    def list_tables(self, conn: Connection, options: RenderOptions) -> List[TableRow]:
        """List base tables, applying the schema allow and deny lists."""
        sql = TABLES_SQL
        params: Dict[str, List[str]] = {}
        expanding = []

        if options.include_schemas:
            sql += " AND t.TABLE_SCHEMA IN :include_schemas"
            params["include_schemas"] = list(options.include_schemas)
            expanding.append(bindparam("include_schemas", expanding=True))

        if options.exclude_schemas:
            sql += " AND t.TABLE_SCHEMA NOT IN :exclude_schemas"
            params["exclude_schemas"] = list(options.exclude_schemas)
            expanding.append(bindparam("exclude_schemas", expanding=True))

        sql += " ORDER BY t.TABLE_SCHEMA, t.TABLE_NAME"

        statement = text(sql)
        if expanding:
            statement = statement.bindparams(*expanding)

        rows = conn.execute(statement, params).mappings().all()
        tables = [
            TableRow(
                schema=row["schema_name"],
                name=row["table_name"],
                kind=row["table_type"],
                description=row["description"],
            )
            for row in rows
        ]
        logger.info(f"Found {len(tables)} tables")
        return tables

    def get_columns(self, conn: Connection, table: TableRow,
                    fk_targets: Dict[Tuple[str, str, str], ForeignKeyRow]) -> List[ColumnRow]:
        """Read the columns of one table in ordinal order."""
        rows = conn.execute(
            text(COLUMNS_SQL),
            {"schema_name": table.schema_name, "table_name": table.name},
        ).mappings().all()

        columns = []
        for row in rows:
            fk = fk_targets.get((table.schema_name, table.name, row["column_name"]))
            columns.append(ColumnRow(
                schema=table.schema_name,
                table=table.name,
                name=row["column_name"],
                data_type=row["data_type"],
                is_nullable=row["is_nullable"] == "YES",
                default_value=row["default_value"],
                max_length=row["max_length"],
                numeric_precision=row["numeric_precision"],
                numeric_scale=row["numeric_scale"],
                is_primary_key=row["is_primary_key"] == 1,
                is_foreign_key=fk is not None,
                is_identity=row["is_identity"] == 1,
                referenced_schema=fk.target_schema if fk else None,
                referenced_table=fk.target_table if fk else None,
                referenced_column=fk.target_column if fk else None,
                ordinal_position=row["ordinal_position"],
                description=row["description"],
            ))
        return columns

    def get_indexes(self, conn: Connection, table: TableRow) -> List[IndexRow]:
        """Read the indexes of one table with their key columns in order."""
        rows = conn.execute(
            text(INDEXES_SQL),
            {"schema_name": table.schema_name, "table_name": table.name},
        ).mappings().all()

        indexes: Dict[str, IndexRow] = {}
        for row in rows:
            index = indexes.get(row["index_name"])
            if index is None:
                index = IndexRow(
                    schema=table.schema_name,
                    table=table.name,
                    name=row["index_name"],
                    index_type=row["index_type"],
                    is_unique=bool(row["is_unique"]),
                    is_primary_key=bool(row["is_primary_key"]),
                )
                indexes[row["index_name"]] = index
            index.columns.append(row["column_name"])
        return list(indexes.values())

    def get_foreign_keys(self, conn: Connection) -> List[ForeignKeyRow]:
        """Read all foreign key column pairs of the database."""
        rows = conn.execute(text(FOREIGN_KEYS_SQL)).mappings().all()
        return [ForeignKeyRow(**dict(row)) for row in rows]

    def close(self) -> None:
        """Dispose of the engine."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            logger.info("Closed database engine")

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("Not connected to the database. Call connect() first.")
        return self.engine
