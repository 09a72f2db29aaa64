from typing import Iterable, List, Optional

from ..core.table_models import ForeignKeyDefinition


def quote_identifier(name: str, quote: str = '"') -> str:
    """Quote an identifier, doubling any embedded quote character"""
    return f"{quote}{name.replace(quote, quote * 2)}{quote}"


def quote_identifiers(names: Iterable[str], quote: str = '"') -> str:
    return ', '.join(quote_identifier(name, quote) for name in names)


def quote_literal(value: str, escape_backslashes: bool = False) -> str:
    """Render a string literal; single quotes are doubled"""
    text = str(value)
    if escape_backslashes:
        text = text.replace('\\', '\\\\')
    return "'" + text.replace("'", "''") + "'"


def format_number(value) -> str:
    if isinstance(value, bool):
        return '1' if value else '0'
    return repr(value) if isinstance(value, float) else str(value)


def foreign_key_clause(fk: ForeignKeyDefinition, quote: str = '"') -> str:
    clause = (
        f"CONSTRAINT {quote_identifier(fk.name, quote)} "
        f"FOREIGN KEY ({quote_identifiers(fk.columns, quote)}) "
        f"REFERENCES {quote_identifier(fk.referenced_table, quote)} "
        f"({quote_identifiers(fk.referenced_columns, quote)})"
    )
    if fk.on_delete:
        clause += f" ON DELETE {fk.on_delete.value}"
    if fk.on_update:
        clause += f" ON UPDATE {fk.on_update.value}"
    return clause


def primary_key_clause(columns: List[str], quote: str = '"') -> Optional[str]:
    """Table-level PRIMARY KEY clause, only needed for composite keys"""
    if len(columns) < 2:
        return None
    return f"PRIMARY KEY ({quote_identifiers(columns, quote)})"


def create_table_statement(table_name: str, body: List[str], quote: str = '"', options: str = "") -> str:
    body_str = ',\n  '.join(body)
    suffix = f" {options}" if options else ""
    return f"""CREATE TABLE IF NOT EXISTS {quote_identifier(table_name, quote)} (
  {body_str}
){suffix};"""
