"""Main CLI interface for SQL Server to ERD tool."""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from sqlalchemy.exc import SQLAlchemyError

from .config import Config
from .catalog_connector import CatalogConnector
from .erd_generator import ERDGenerator
from .schema_analyzer import SchemaAnalyzer


logger = logging.getLogger(__name__)


# Configure logging
def setup_logging(log_level: str, log_file: Optional[str] = None):
    """Setup logging configuration.

    Args:
        log_level: Logging level
        log_file: Optional log file path
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def split_values(values: Tuple[str, ...]) -> List[str]:
    """Flatten repeated and comma-separated option values."""
    return [item.strip() for value in values for item in value.split(',') if item.strip()]


@click.command()
@click.option('--connection-string', '-c', help='SQLAlchemy URL or ODBC connection string (overrides .env)')
@click.option('--snapshot', 'snapshot_file', help='Catalog snapshot JSON file to use instead of a database')
@click.option('--output', '-o', 'output_file', help='Output file path (.puml, .plantuml or .pu)')
@click.option('--type', '-t', 'diagram_type',
              type=click.Choice(['entity', 'class'], case_sensitive=False),
              help='Type of diagram to generate')
@click.option('--config', 'config_file', help='Configuration file path (JSON format)')
@click.option('--include-schemas', multiple=True, help='Schemas to include (comma-separated)')
@click.option('--exclude-schemas', multiple=True, help='Schemas to exclude (comma-separated)')
@click.option('--exclude-tables', multiple=True,
              help='Table names to exclude (comma-separated, supports wildcards like *temp*, __*)')
@click.option('--max-tables', type=click.IntRange(min=0),
              help='Maximum number of tables to include (0 for unlimited)')
@click.option('--include-data-types/--no-include-data-types', default=None,
              help='Include column data types in the diagram')
@click.option('--include-relationships/--no-include-relationships', default=None,
              help='Include foreign key relationships in the diagram')
@click.option('--include-indexes/--no-include-indexes', default=None,
              help='Include indexes in the diagram')
@click.option('--theme', help='PlantUML theme to use')
@click.option('--env-file', help='Path to .env file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--dry-run', is_flag=True, help='Show what would be done without executing')
def main(connection_string: Optional[str],
         snapshot_file: Optional[str],
         output_file: Optional[str],
         diagram_type: Optional[str],
         config_file: Optional[str],
         include_schemas: Tuple[str, ...],
         exclude_schemas: Tuple[str, ...],
         exclude_tables: Tuple[str, ...],
         max_tables: Optional[int],
         include_data_types: Optional[bool],
         include_relationships: Optional[bool],
         include_indexes: Optional[bool],
         theme: Optional[str],
         env_file: Optional[str],
         verbose: bool,
         dry_run: bool):
    """Generate PlantUML diagrams from SQL Server databases.

    This tool reads the catalog of a SQL Server database (or a saved catalog
    snapshot), filters the tables, resolves foreign key relationships and
    writes an entity-relationship or class diagram in PlantUML syntax.

    Examples:

        # Basic usage with .env file
        sqlserver-to-erd -o schema.puml

        # Class diagram for the sales schema only
        sqlserver-to-erd -o sales.puml -t class --include-schemas sales

        # Skip temporary and audit tables
        sqlserver-to-erd -o schema.puml --exclude-tables "*temp*,audit_*"
    """
    connector = None
    try:
        # Load configuration
        config_manager = Config(env_file)

        # Build configuration overrides
        overrides = {}
        if connection_string:
            overrides['connection_string'] = connection_string
        if snapshot_file:
            overrides['snapshot_file'] = snapshot_file
        if output_file:
            overrides['output_file'] = output_file
        if diagram_type:
            overrides['diagram_style'] = diagram_type
        if config_file:
            overrides['config_file'] = config_file

        # Get configuration
        config = config_manager.get_erd_config(**overrides)

        # Setup logging
        log_level = 'DEBUG' if verbose else config.log_level
        setup_logging(log_level, config.log_file)
        logger.debug("Verbose logging enabled")

        options = config_manager.load_render_options(config.config_file)
        options = config_manager.apply_overrides(
            options,
            include_schemas=split_values(include_schemas),
            exclude_schemas=split_values(exclude_schemas),
            exclude_tables=split_values(exclude_tables),
            max_tables=max_tables,
            include_data_types=include_data_types,
            include_relationships=include_relationships,
            include_indexes=include_indexes,
            theme=theme,
        )

        if dry_run:
            click.echo("DRY RUN - Configuration:")
            click.echo(f"  Source: {config.snapshot_file or 'database'}")
            click.echo(f"  Output File: {config.output_file}")
            click.echo(f"  Diagram Type: {config.diagram_style.value}")
            click.echo(f"  Include Schemas: {', '.join(options.include_schemas) or 'all'}")
            click.echo(f"  Exclude Schemas: {', '.join(options.exclude_schemas) or 'none'}")
            click.echo(f"  Exclude Tables: {', '.join(options.exclude_tables) or 'none'}")
            click.echo(f"  Max Tables: {options.max_tables or 'unlimited'}")
            click.echo(f"  Include Data Types: {options.include_data_types}")
            click.echo(f"  Include Relationships: {options.include_relationships}")
            click.echo(f"  Include Indexes: {options.include_indexes}")
            click.echo(f"  Theme: {options.theme or 'default'}")
            return

        # Validate configuration
        config_manager.validate_config(config)

        if config.snapshot_file:
            click.echo(f"Loading catalog snapshot: {config.snapshot_file}")
            snapshot = config_manager.load_snapshot(config.snapshot_file)
        else:
            click.echo("Connecting to database and extracting schema...")
            connector = CatalogConnector(config.connection_string)
            connector.connect()
            snapshot = connector.get_snapshot(options)

        analyzer = SchemaAnalyzer(options)
        schema = analyzer.build_schema(snapshot)
        for warning in analyzer.warnings:
            click.echo(f"Warning: {warning}", err=True)

        click.echo("Generating PlantUML diagram...")
        generator = ERDGenerator(options)
        content = generator.generate_erd(schema, config.diagram_style)

        # Write output file
        output_path = Path(config.output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"PlantUML diagram generated successfully: {output_path}")
        click.echo(f"PlantUML diagram generated: {output_path}")
        click.echo(f"Tables processed: {len(schema.tables)}")
        click.echo(f"Relationships: {len(schema.relationships)}")

    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user")
        sys.exit(1)
    except SQLAlchemyError as e:
        click.echo(f"Database error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        if connector:
            connector.close()


if __name__ == '__main__':
    main()
