"""CLI context management for schema loading and shared state."""

import os
from dataclasses import dataclass, field

from querytutor.challenges.service import ChallengeService
from querytutor.query.analyzer import QueryAnalyzer
from querytutor.schema.provider import SchemaProvider

DEFAULT_SCHEMA_PATH = "nemory-schema.yaml"


def get_schema_path(path: str | None) -> str:
    """Resolve the schema YAML path from CLI arg, environment variable, or default.

    Priority:
    1. Explicit path argument
    2. QUERYTUTOR_SCHEMA environment variable
    3. Default: nemory-schema.yaml
    """
    if path:
        return path
    if env_path := os.getenv("QUERYTUTOR_SCHEMA"):
        return env_path
    return DEFAULT_SCHEMA_PATH


def get_database_url(url: str | None) -> str | None:
    """Resolve a live database URL from CLI arg or QUERYTUTOR_DATABASE_URL.

    Returns None when the schema should come from YAML instead.
    """
    if url:
        return url
    return os.getenv("QUERYTUTOR_DATABASE_URL") or None


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Loads the schema lazily so commands that fail on arguments never touch it.
    """

    schema_path: str
    database_url: str | None
    json_output: bool
    verbose: bool = False
    _provider: SchemaProvider | None = field(default=None, init=False, repr=False)
    _service: ChallengeService | None = field(default=None, init=False, repr=False)

    @property
    def schema_source(self) -> str:
        return self.database_url or self.schema_path

    def get_provider(self) -> SchemaProvider:
        """Get or load the schema provider (lazy initialization)."""
        if self._provider is None:
            if self.database_url:
                self._provider = SchemaProvider.from_database(self.database_url)
            else:
                self._provider = SchemaProvider.from_yaml(self.schema_path)
        return self._provider

    def get_service(self) -> ChallengeService:
        if self._service is None:
            self._service = ChallengeService(self.get_provider())
        return self._service

    def get_analyzer(self) -> QueryAnalyzer:
        return QueryAnalyzer(self.get_provider())
