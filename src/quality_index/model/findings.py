"""Findings and the named Diagnostic buckets that hold them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class Finding:
    """One occurrence reported by a static analysis tool."""

    identifier: str
    severity: float = 1.0
    location: str = ""


class Diagnostic:
    """Findings produced by one detection rule, addressed by name.

    A Diagnostic is *absent* until a tool result is merged into it. An
    absent Diagnostic and one that ran without findings both count zero
    findings; ``has_run`` tells them apart.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        tool: Optional[str] = None,
        findings: Optional[Iterable[Finding]] = None,
    ):
        self.name = name
        self.description = description
        self.tool = tool
        self._findings: Optional[list[Finding]] = None
        if findings is not None:
            self.set_findings(findings)

    @property
    def has_run(self) -> bool:
        return self._findings is not None

    @property
    def findings(self) -> tuple[Finding, ...]:
        return tuple(self._findings or ())

    @property
    def count(self) -> int:
        return len(self._findings or ())

    def add_finding(self, finding: Finding) -> None:
        if self._findings is None:
            self._findings = []
        self._findings.append(finding)

    def set_findings(self, findings: Iterable[Finding]) -> None:
        """Replace the findings; the diagnostic counts as having run afterwards."""
        self._findings = list(findings)

    def reset(self) -> None:
        self._findings = None

    def empty_copy(self) -> Diagnostic:
        return Diagnostic(self.name, self.description, self.tool)

    def __repr__(self) -> str:
        state = f"{self.count} findings" if self.has_run else "absent"
        return f"Diagnostic({self.name!r}, {state})"
