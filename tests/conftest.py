"""Shared test fixtures for querytutor."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from querytutor.challenges.service import ChallengeService
from querytutor.schema.provider import SchemaProvider

SHOP_YAML = """\
databaseId: shop
catalogs:
  - name: main
    description: Online shop
    schemas:
      - name: public
        tables:
          - name: customers
            description: People who place orders
            columns:
              - {name: id, type: integer, nullable: false}
              - {name: name, type: varchar(100), nullable: false}
              - {name: email, type: varchar(255), nullable: false, description: Login email}
              - {name: city, type: varchar(50), nullable: true}
            primaryKey: [id]
            indexes:
              - {name: customers_email_key, columns: [email], unique: true}
            samples:
              - {id: 1, name: Ada Lovelace, email: ada@example.com, city: London}
              - {id: 2, name: Alan Turing, email: alan@example.com, city: null}
          - name: orders
            columns:
              - {name: id, type: integer, nullable: false}
              - {name: customer_id, type: integer, nullable: false}
              - {name: status, type: varchar(20), nullable: false}
              - {name: total, type: "decimal(10,2)", nullable: true}
            primaryKey: [id]
            foreignKeys:
              - {columnName: customer_id, referencedTable: customers, referencedColumn: id}
            indexes:
              - {name: idx_orders_customer_id, columns: [customer_id]}
            samples:
              - {id: 1, customer_id: 1, status: Pending, total: 99.5}
              - {id: 2, customer_id: 2, status: Shipped, total: 12.0}
              - {id: 3, customer_id: 1, status: Pending, total: null}
"""

EVENTS_YAML = """\
databaseId: analytics
catalogs:
  - name: main
    schemas:
      - name: public
        tables:
          - name: events
            columns:
              - {name: id, type: integer, nullable: false}
              - {name: category, type: varchar(30), nullable: false}
              - {name: created_at, type: timestamp, nullable: false}
            primaryKey: [id]
            samples:
              - {id: 1, category: click, created_at: "2024-01-01 10:00"}
              - {id: 2, category: view, created_at: "2024-01-01 10:05"}
              - {id: 3, category: click, created_at: "2024-01-01 10:07"}
              - {id: 4, category: purchase, created_at: "2024-01-01 11:00"}
"""


class ScriptedRandom:
    """Random source that returns ``seq[i]`` for a scripted list of indexes.

    Once the script runs out it always picks the first element.
    """

    def __init__(self, *indexes: int) -> None:
        self._indexes = list(indexes)

    def choice(self, seq: Sequence[Any]) -> Any:
        index = self._indexes.pop(0) if self._indexes else 0
        return seq[index]


@pytest.fixture
def provider() -> SchemaProvider:
    """Shop schema: customers <- orders (orders.customer_id references customers.id)."""
    return SchemaProvider.from_yaml_string(SHOP_YAML, source="shop.yaml")


@pytest.fixture
def events_provider() -> SchemaProvider:
    """Single-table schema without foreign keys."""
    return SchemaProvider.from_yaml_string(EVENTS_YAML, source="events.yaml")


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    """Shop schema written to a YAML file."""
    path = tmp_path / "shop.yaml"
    path.write_text(SHOP_YAML, encoding="utf-8")
    return path


@pytest.fixture
def events_schema_file(tmp_path: Path) -> Path:
    """Events schema written to a YAML file."""
    path = tmp_path / "events.yaml"
    path.write_text(EVENTS_YAML, encoding="utf-8")
    return path


@pytest.fixture
def scripted_rng() -> type[ScriptedRandom]:
    """Factory for deterministic random sources: ``scripted_rng(1, 2)``."""
    return ScriptedRandom


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Sequential UUID-shaped challenge ids."""
    counter = itertools.count(1)
    return lambda: f"00000000-0000-4000-8000-{next(counter):012d}"


@pytest.fixture
def service(provider: SchemaProvider, id_factory: Callable[[], str]) -> ChallengeService:
    return ChallengeService(provider, id_factory=id_factory)
