"""
Quantization preference for picking a default model file.
"""

from dataclasses import dataclass
from typing import Sequence

from nobold.models.hub import CandidateFile

# Highest priority first. Matched as case-insensitive substrings of the file path.
QUANT_PREFERENCE: tuple[str, ...] = ("q4k", "q4_k", "q4", "q3", "q5", "q6", "q8")


def select_best(
    candidates: Sequence[CandidateFile],
    preference: Sequence[str] = QUANT_PREFERENCE,
) -> CandidateFile:
    """
    Pick the recommended file among candidates.

    The first candidate matching the highest-priority token wins.
    Falls back to the first candidate when nothing matches.

    Raises:
        ValueError: candidates is empty
    """
    if not candidates:
        raise ValueError("select_best() requires at least one candidate")

    lowered = [c.path.lower() for c in candidates]
    for token in preference:
        for candidate, path in zip(candidates, lowered):
            if token in path:
                return candidate

    return candidates[0]


@dataclass(frozen=True)
class SelectionResult:
    """Files of a repository with the recommended one."""

    source_repo: str
    all_candidates: list[CandidateFile]
    recommended: CandidateFile

    @property
    def recommended_index(self) -> int:
        """1-based position of the recommended file."""
        for i, candidate in enumerate(self.all_candidates, start=1):
            if candidate is self.recommended:
                return i
        return 1


def build_selection(source_repo: str, candidates: list[CandidateFile]) -> SelectionResult:
    return SelectionResult(
        source_repo=source_repo,
        all_candidates=candidates,
        recommended=select_best(candidates),
    )
