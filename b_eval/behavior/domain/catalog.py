"""BehaviorCatalog Protocol — structural interface for the behavior source."""

from typing import Protocol

from b_eval.behavior.domain.behavior import Behavior


class BehaviorCatalog(Protocol):
    """Lists built-in behaviors first, then user-defined ones in insertion order."""

    def list_behaviors(self) -> list[Behavior]: ...

    def add_behavior(self, key: str, description: str) -> Behavior: ...


def find_behavior(catalog: BehaviorCatalog, key: str) -> Behavior | None:
    return next((b for b in catalog.list_behaviors() if b.key == key), None)
