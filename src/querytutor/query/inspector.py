"""Structural inspection of SELECT statements.

Thin layer over sqlparse: split out a single SELECT, answer yes/no
structural questions about it, and pull out the tables and filter columns
it uses. sqlparse is non-validating, so these are best-effort readings of
the token stream rather than a full semantic analysis.
"""

from __future__ import annotations

from collections.abc import Iterator

import sqlparse
from sqlparse import sql
from sqlparse import tokens as T

from querytutor.exceptions import NotSelectError, SqlParseError


def _significant(tokens: Iterator[sql.Token]) -> Iterator[sql.Token]:
    for token in tokens:
        if token.is_whitespace or token.ttype in T.Comment or isinstance(token, sql.Comment):
            continue
        yield token


def _keyword(token: sql.Token) -> str | None:
    """Upper-cased keyword text with inner whitespace collapsed (``GROUP BY``)."""
    if not token.is_keyword:
        return None
    return " ".join(token.normalized.split())


def _is_select_keyword(token: sql.Token) -> bool:
    return token.ttype is T.Keyword.DML and token.normalized == "SELECT"


def _contains_select(group: sql.TokenList) -> bool:
    return any(_is_select_keyword(token) for token in group.flatten())


def parse_select(sql_text: str | None) -> sql.Statement:
    """Parse text as exactly one SELECT statement (a leading WITH is allowed).

    Args:
        sql_text: SQL text

    Returns:
        Parsed statement

    Raises:
        SqlParseError: If the text is blank or holds several statements
        NotSelectError: If the statement is not a SELECT
    """
    text = (sql_text or "").strip()
    if not text:
        raise SqlParseError("", "empty query")

    statements = [s for s in sqlparse.parse(text) if s.token_first(skip_cm=True) is not None]
    if not statements:
        raise SqlParseError(text, "no statement found")
    if len(statements) > 1:
        raise SqlParseError(text, f"expected a single statement, got {len(statements)}")

    statement = statements[0]
    statement_type = statement.get_type()
    if statement_type != "SELECT":
        raise NotSelectError(text, statement_type)
    return statement


def try_parse_select(sql_text: str | None) -> sql.Statement | None:
    """Parse a SELECT, returning None instead of raising."""
    try:
        return parse_select(sql_text)
    except SqlParseError:
        return None


def canonical_sql(statement: sql.Statement) -> str:
    """Render a statement as single-spaced tokens.

    Keywords are upper-cased, identifiers lower-cased, string literals kept
    as written; comments and a trailing semicolon are dropped.
    """
    parts = []
    for token in _significant(statement.flatten()):
        keyword = _keyword(token)
        if keyword is not None:
            parts.append(keyword)
        elif token.ttype in T.Name:
            parts.append(token.value.lower())
        else:
            parts.append(token.value)
    if parts and parts[-1] == ";":
        parts.pop()
    return " ".join(parts)


def has_join(statement: sql.Statement) -> bool:
    return any((_keyword(t) or "").endswith("JOIN") for t in statement.flatten())


def has_group_by(statement: sql.Statement) -> bool:
    return any(_keyword(t) == "GROUP BY" for t in statement.flatten())


def has_subquery(statement: sql.Statement) -> bool:
    return sum(1 for t in statement.flatten() if _is_select_keyword(t)) > 1


def has_window_function(statement: sql.Statement) -> bool:
    return any(_keyword(t) == "OVER" for t in statement.flatten())


def has_select_star(statement: sql.Statement) -> bool:
    """True for ``SELECT *`` and ``SELECT t.*`` projections of the outer query."""
    in_projection = False
    for token in _significant(iter(statement.tokens)):
        if _is_select_keyword(token):
            in_projection = True
            continue
        if not in_projection:
            continue
        if token.is_keyword and _keyword(token) != "DISTINCT":
            return False

        items = token.get_identifiers() if isinstance(token, sql.IdentifierList) else [token]
        for item in items:
            if item.ttype is T.Wildcard:
                return True
            if isinstance(item, sql.Identifier) and item.is_wildcard():
                return True
    return False


def has_where(statement: sql.Statement) -> bool:
    return any(isinstance(token, sql.Where) for token in statement.tokens)


def has_in_subquery(statement: sql.Statement) -> bool:
    tokens = list(_significant(statement.flatten()))
    for i, token in enumerate(tokens[:-2]):
        if _keyword(token) == "IN":
            if tokens[i + 1].match(T.Punctuation, "(") and _is_select_keyword(tokens[i + 2]):
                return True
    return False


def _collect_tables(group: sql.TokenList, names: list[str], cte_names: set[str]) -> None:
    expecting: str | None = None
    for token in _significant(iter(group.tokens)):
        if token.is_keyword:
            keyword = _keyword(token) or ""
            if expecting == "table" and token.ttype is T.Keyword and keyword != "LATERAL":
                # Table names such as events or type lex as keywords
                if token.value not in names:
                    names.append(token.value)
                expecting = None
            elif token.ttype is T.Keyword.CTE:
                expecting = "cte"
            elif keyword == "FROM" or keyword.endswith("JOIN"):
                expecting = "table"
            else:
                expecting = None
            continue

        if expecting is None:
            if token.is_group:
                _collect_tables(token, names, cte_names)
            continue

        items = token.get_identifiers() if isinstance(token, sql.IdentifierList) else [token]
        for item in items:
            if expecting == "cte" and isinstance(item, sql.Identifier):
                cte_names.add(item.get_name())
                _collect_tables(item, names, cte_names)
            elif isinstance(item, sql.Parenthesis) or (item.is_group and _contains_select(item)):
                _collect_tables(item, names, cte_names)
            elif isinstance(item, sql.Identifier):
                name = item.get_real_name()
                if name and name not in names:
                    names.append(name)
            elif item.ttype in T.Name and item.value not in names:
                names.append(item.value)
        expecting = None


def extract_table_names(statement: sql.Statement) -> list[str]:
    """Tables referenced anywhere in the query, de-duplicated, CTE names excluded."""
    names: list[str] = []
    cte_names: set[str] = set()
    _collect_tables(statement, names, cte_names)
    return [name for name in names if name not in cte_names]


def _collect_columns(group: sql.TokenList, columns: list[tuple[str | None, str]]) -> None:
    for token in group.tokens:
        if isinstance(token, sql.Parenthesis) and _contains_select(token):
            continue
        if isinstance(token, sql.Function):
            for child in token.tokens:
                if isinstance(child, sql.Parenthesis):
                    _collect_columns(child, columns)
            continue
        if isinstance(token, sql.Identifier):
            if any(child.is_group for child in token.tokens):
                _collect_columns(token, columns)
                continue
            entry = (token.get_parent_name(), token.get_real_name())
        elif token.is_group:
            _collect_columns(token, columns)
            continue
        elif token.ttype in T.Name and token.ttype not in T.Name.Builtin:
            entry = (None, token.value)
        else:
            continue

        if entry[1] and entry not in columns:
            columns.append(entry)


def where_columns(statement: sql.Statement) -> list[tuple[str | None, str]]:
    """Columns referenced in the top-level WHERE clause as (qualifier, name) pairs."""
    columns: list[tuple[str | None, str]] = []
    for token in statement.tokens:
        if isinstance(token, sql.Where):
            _collect_columns(token, columns)
    return columns
