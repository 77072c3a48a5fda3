"""Per-resource ingestion outcomes.

Each entry of the ``--resources`` input produces exactly one IngestOutcome.
Ingestors never raise for recoverable failures; they return an outcome with
``status=FAILED`` and the stage that failed, so callers (and tests) can
inspect results without scraping log output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from kubequery.models.resources import ResourceSpec, ResourceType


class IngestStatus(StrEnum):
    """Final state of one input entry."""

    STORED = "stored"
    FAILED = "failed"
    SKIPPED = "skipped"


class IngestStage(StrEnum):
    """Step of the fetch/serialize/insert sequence an outcome refers to."""

    PARSE = "parse"
    FETCH = "fetch"
    SERIALIZE = "serialize"
    INSERT = "insert"


@dataclass
class LogCollectionOutcome:
    """Result of collecting pod logs for one stored deployment."""

    deployment_id: int
    label_selector: str
    pods: list[str] = field(default_factory=list)
    failed_pods: list[str] = field(default_factory=list)
    bytes_collected: int = 0
    record_id: int | None = None
    error: str | None = None  # list or insert failure

    @property
    def stored(self) -> bool:
        return self.record_id is not None

    @property
    def collected_pods(self) -> list[str]:
        return [p for p in self.pods if p not in self.failed_pods]


@dataclass
class IngestOutcome:
    """Result of processing one input entry."""

    entry: str
    status: IngestStatus
    spec: ResourceSpec | None = None
    record_id: int | None = None
    stage: IngestStage | None = None  # set when FAILED or SKIPPED
    error: str | None = None
    logs: LogCollectionOutcome | None = None

    # (ResourceType, name) pairs referenced by a stored deployment's pod template
    references: set[tuple[ResourceType, str]] = field(default_factory=set)

    @classmethod
    def stored(cls, spec: ResourceSpec, record_id: int) -> IngestOutcome:
        return cls(entry=str(spec), status=IngestStatus.STORED, spec=spec, record_id=record_id)

    @classmethod
    def failed(cls, spec: ResourceSpec, stage: IngestStage, error: Exception | str) -> IngestOutcome:
        return cls(
            entry=str(spec),
            status=IngestStatus.FAILED,
            spec=spec,
            stage=stage,
            error=str(error),
        )

    @classmethod
    def skipped(cls, entry: str, reason: str) -> IngestOutcome:
        return cls(entry=entry, status=IngestStatus.SKIPPED, stage=IngestStage.PARSE, error=reason)


@dataclass
class RunSummary:
    """All outcomes of one run, in input order."""

    outcomes: list[IngestOutcome] = field(default_factory=list)

    def add(self, outcome: IngestOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: IngestStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def stored(self) -> int:
        return self._count(IngestStatus.STORED)

    @property
    def failed(self) -> int:
        return self._count(IngestStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(IngestStatus.SKIPPED)

    def as_dict(self) -> dict[str, int]:
        return {
            "total": len(self.outcomes),
            "stored": self.stored,
            "failed": self.failed,
            "skipped": self.skipped,
        }
