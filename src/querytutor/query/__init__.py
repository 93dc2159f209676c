"""SQL inspection and analysis for the tutor tools.

Architecture:
    1. Inspector - parses SELECT statements (sqlparse) and answers structural questions
    2. Analyzer - schema-aware complexity analysis and optimization hints

Example:
    analyzer = QueryAnalyzer(provider)
    analysis = analyzer.analyze("SELECT * FROM orders WHERE status = 'Pending'")
    hints = analyzer.suggest_optimizations("SELECT * FROM orders WHERE status = 'Pending'")
"""

from querytutor.query.analyzer import QueryAnalyzer
from querytutor.query.inspector import canonical_sql, parse_select, try_parse_select

__all__ = [
    "QueryAnalyzer",
    "canonical_sql",
    "parse_select",
    "try_parse_select",
]
