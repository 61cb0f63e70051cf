"""Job record store interface.

The operator is stateless except for the job records held by the store
(Kubernetes in production, SQLite locally). The launcher only ever lists and
creates records; everything after creation belongs to the store.

Concrete drivers live in `storage/` (SQLite default).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class LabelSelector:
    """Conjunction of exact `key=value` label requirements.

    Kept structured so repository names are matched as values, never spliced
    into a query string.
    """

    requirements: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, raw: str) -> "LabelSelector":
        reqs: list[tuple[str, str]] = []
        for part in raw.split(","):
            part = part.strip()
            if not part:
                continue
            key, sep, value = part.partition("=")
            key, value = key.strip(), value.strip()
            if not sep or not key or "=" in value or "!" in key:
                raise ValueError(f"unsupported selector requirement: {part!r} (expected key=value)")
            reqs.append((key, value))
        return cls(tuple(reqs))

    def with_label(self, key: str, value: str) -> "LabelSelector":
        kept = tuple((k, v) for k, v in self.requirements if k != key)
        return LabelSelector(kept + ((key, value),))

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        labels = labels or {}
        return all(labels.get(k) == v for k, v in self.requirements)

    def __str__(self) -> str:
        return ",".join(f"{k}={v}" for k, v in self.requirements)


class JobStore(ABC):
    @abstractmethod
    def list(self, namespace: str, selector: LabelSelector) -> list[dict[str, Any]]:
        """List Job records in a namespace whose labels match the selector.

        May raise NotFoundError when the namespace has no records at all.
        """

    @abstractmethod
    def create(self, namespace: str, job: dict[str, Any]) -> dict[str, Any]:
        """Create a Job record and return it as stored (creationTimestamp populated).

        Must fail with ConflictError if a Job with the same name already exists.
        """
