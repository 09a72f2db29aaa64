#!/usr/bin/env python3
"""
entityschema CLI

Generate CREATE TABLE statements from a YAML entity file.
"""

import click
import logging
import sys
from typing import Optional, Tuple

from ..config.config_loader import ConfigLoader
from ..core.exceptions import EntitySchemaError


def _setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def _load_resolved(config_file: str, entities: Tuple[str, ...]):
    from ..config.resolver import resolve_all

    schema_config = ConfigLoader.load_from_yaml(config_file)
    resolved = resolve_all(schema_config.entities, schema_config.database)
    unknown = [name for name in entities if name not in resolved]
    if unknown:
        raise click.BadParameter(f"Unknown entity: {', '.join(unknown)}", param_hint='--entity')
    return schema_config, resolved


@click.group()
def entityschema():
    """Entity schema tools - resolve entities and generate dialect SQL"""
    pass


@entityschema.command()
@click.argument('config_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--dialect', '-d', default=None, help='Target dialect (sqlite, mysql, postgres); defaults to the file\'s dialect')
@click.option('--entity', '-e', 'entities', multiple=True, help='Only generate these entities')
@click.option('--output', '-o', type=click.Path(dir_okay=False, writable=True), default=None,
              help='Write SQL to a file instead of stdout')
@click.option('--log-level', default='WARNING',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              help='Set the logging level')
def ddl(config_file: str, dialect: Optional[str], entities: Tuple[str, ...], output: Optional[str], log_level: str):
    """Generate CREATE TABLE SQL for the entities in CONFIG_FILE"""
    _setup_logging(log_level)
    logger = logging.getLogger(__name__)

    from ..adapters.registry import get_adapter
    from ..utils.table_generator import TableDefinitionGenerator

    try:
        schema_config, resolved = _load_resolved(config_file, entities)
        target = dialect or schema_config.dialect or 'postgres'
        generator = TableDefinitionGenerator(get_adapter(target))

        selected = entities or tuple(resolved)
        statements = [generator.generate_sql(resolved[name], catalog=resolved) for name in selected]
    except (EntitySchemaError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    sql = '\n\n'.join(statements) + '\n'
    if output:
        with open(output, 'w') as f:
            f.write(sql)
        logger.info(f"Wrote {len(statements)} table(s) for {target} to {output}")
        click.echo(f"Wrote {len(statements)} table(s) to {output}")
    else:
        click.echo(sql, nl=False)


@entityschema.command()
@click.argument('config_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--dialect', '-d', default=None, help='Target dialect; defaults to the file\'s dialect')
@click.option('--entity', '-e', 'entities', multiple=True, help='Only describe these entities')
def describe(config_file: str, dialect: Optional[str], entities: Tuple[str, ...]):
    """Show resolved columns, keys and deferred defaults"""
    from ..adapters.registry import get_adapter

    try:
        schema_config, resolved = _load_resolved(config_file, entities)
        adapter = get_adapter(dialect or schema_config.dialect or 'postgres')
        tables = [
            adapter.generate_table_definition(resolved[name], catalog=resolved)
            for name in (entities or tuple(resolved))
        ]
    except (EntitySchemaError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for table in tables:
        click.echo(f"\nTable: {table.name} ({adapter.name})")
        click.echo("-" * (len(table.name) + len(adapter.name) + 10))
        for col in table.columns:
            flags = []
            if col.name in table.primary_key:
                flags.append("PK")
            if col.auto_increment:
                flags.append("AUTO")
            if not col.nullable:
                flags.append("NOT NULL")
            if col.default_value is not None:
                flags.append(f"DEFAULT {col.default_value}")
            if col.references:
                flags.append(f"-> {col.references.table}.{col.references.column}")
            click.echo(f"  {col.name}: {col.type} {' '.join(flags)}".rstrip())
        if table.deferred_defaults:
            click.echo(f"  Application defaults: {', '.join(table.deferred_defaults)}")


@entityschema.command()
def dialects():
    """List registered dialects"""
    from ..adapters.registry import get_adapters

    for name, adapter in sorted(get_adapters().items()):
        click.echo(f"{name}: {adapter.__class__.__name__}")


if __name__ == '__main__':
    entityschema()
