"""Data passed between the stages of a review run."""

from __future__ import annotations

from dataclasses import dataclass, field

PARSE_FAILURE_SUMMARY = "Could not parse AI response as JSON."


@dataclass(frozen=True)
class FilePayload:
    """One changed file offered to the reviewer."""

    path: str
    language: str
    content: str


@dataclass(frozen=True)
class SkippedFile:
    """A changed file that was left out of the prompt, and why."""

    path: str
    reason: str


@dataclass
class CollectedFiles:
    files: list[FilePayload] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)


def _as_str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key!r} must be a string, got {type(value).__name__}")
    return value


def _as_int(data: dict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    # bool is a subclass of int; a JSON true is not a line number.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key!r} must be an integer, got {type(value).__name__}")
    return value


@dataclass
class Finding:
    """One issue reported by the model."""

    title: str = ""
    priority: str = ""
    file: str = ""
    details: str = ""
    start_line: int = 0
    end_line: int = 0
    suggested_patch: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Finding:
        if not isinstance(data, dict):
            raise ValueError(f"finding must be an object, got {type(data).__name__}")
        return cls(
            title=_as_str(data, "title"),
            priority=_as_str(data, "priority"),
            file=_as_str(data, "file"),
            details=_as_str(data, "details"),
            start_line=_as_int(data, "start_line"),
            end_line=_as_int(data, "end_line"),
            suggested_patch=_as_str(data, "suggested_patch"),
        )

    @property
    def is_anchored(self) -> bool:
        """True when the finding can be posted as an inline comment."""
        return bool(self.file and self.details) and self.start_line > 0


@dataclass
class ReviewResult:
    """The model's review, as decoded from its JSON response."""

    summary: str = ""
    repo_suggestions: list[str] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> ReviewResult:
        """Build a result from decoded JSON.

        Raises ValueError when the document does not have the expected shape;
        missing keys are fine and take their empty defaults.
        """
        if not isinstance(data, dict):
            raise ValueError(f"review must be a JSON object, got {type(data).__name__}")

        suggestions = data.get("repo_suggestions") or []
        if not isinstance(suggestions, list) or not all(isinstance(s, str) for s in suggestions):
            raise ValueError("'repo_suggestions' must be a list of strings")

        findings = data.get("findings") or []
        if not isinstance(findings, list):
            raise ValueError("'findings' must be a list")

        return cls(
            summary=_as_str(data, "summary"),
            repo_suggestions=list(suggestions),
            findings=[Finding.from_dict(f) for f in findings],
        )

    @classmethod
    def unparseable(cls) -> ReviewResult:
        return cls(summary=PARSE_FAILURE_SUMMARY)
