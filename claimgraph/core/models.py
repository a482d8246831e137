"""
Core Value Objects

Input records for the claim-graph analysis pipeline and the enums shared by
every stage.  Records arrive pre-extracted from several reasoning sources
("models"); this module only validates their *shape*.  Semantic clean-up
(relationship aliases, dangling edges, duplicate ids) is the job of the
GraphBuilder.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


class InputValidationError(ValueError):
    """Raised when the caller hands over records that violate the input contract."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EdgeKind(str, Enum):
    SUPPORTS = "supports"
    CONFLICTS = "conflicts"
    TRADEOFF = "tradeoff"
    PREREQUISITE = "prerequisite"

    @property
    def is_supportive(self) -> bool:
        return self in (EdgeKind.SUPPORTS, EdgeKind.PREREQUISITE)

    @property
    def is_tension(self) -> bool:
        return self in (EdgeKind.CONFLICTS, EdgeKind.TRADEOFF)


class ClaimCategory(str, Enum):
    FACTUAL = "factual"
    PRESCRIPTIVE = "prescriptive"
    CONDITIONAL = "conditional"
    CONTESTED = "contested"
    SPECULATIVE = "speculative"


class ClaimRole(str, Enum):
    ANCHOR = "anchor"
    BRANCH = "branch"
    CHALLENGER = "challenger"
    SUPPLEMENT = "supplement"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, lower sorts first."""
        return {"high": 0, "medium": 1, "low": 2}[self.value]


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClaimData:
    """A discrete assertion with support from one or more sources."""
    id: str
    label: str
    text: str = ""
    supporters: Tuple[str, ...] = ()
    support_count: int = 0
    category: str = ClaimCategory.PRESCRIPTIVE.value
    role: str = ClaimRole.ANCHOR.value
    challenges: Optional[str] = None
    mentions: Tuple[Tuple[str, int], ...] = ()

    @property
    def mention_counts(self) -> Dict[str, int]:
        return dict(self.mentions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "text": self.text,
            "supporters": list(self.supporters),
            "mentions": [[s, n] for s, n in self.mentions],
            "support_count": self.support_count,
            "category": self.category,
            "role": self.role,
            "challenges": self.challenges,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any], position: int = 0) -> "ClaimData":
        if not isinstance(data, Mapping):
            raise InputValidationError(
                f"claims[{position}] must be an object, got {type(data).__name__}"
            )
        raw_id = data.get("id")
        if raw_id is None or str(raw_id).strip() == "":
            raise InputValidationError(f"claims[{position}] is missing required field 'id'")
        claim_id = str(raw_id).strip()

        raw_supporters = data.get("supporters") or []
        if not isinstance(raw_supporters, (list, tuple, set, frozenset)):
            raise InputValidationError(
                f"claims[{position}] ('{claim_id}'): 'supporters' must be a list"
            )

        counts: Dict[str, int] = {}
        for s in raw_supporters:
            key = normalize_source_id(s)
            if key is None:
                continue
            counts[key] = counts.get(key, 0) + 1

        # serialized form carries the multiset explicitly
        for pair in data.get("mentions") or []:
            try:
                source, n = pair
                key, n = normalize_source_id(source), int(n)
            except (TypeError, ValueError):
                raise InputValidationError(
                    f"claims[{position}] ('{claim_id}'): 'mentions' must be [source, count] pairs"
                ) from None
            if key in counts and n > 0:
                counts[key] = n

        try:
            support_count = int(data.get("support_count") or 0)
        except (TypeError, ValueError):
            raise InputValidationError(
                f"claims[{position}] ('{claim_id}'): 'support_count' must be an integer"
            ) from None

        label = str(data.get("label") or claim_id)
        challenges = data.get("challenges")
        return ClaimData(
            id=claim_id,
            label=label,
            text=str(data.get("text") or label),
            supporters=tuple(counts),
            support_count=support_count,
            category=str(data.get("category") or data.get("type") or ClaimCategory.PRESCRIPTIVE.value),
            role=str(data.get("role") or ClaimRole.ANCHOR.value),
            challenges=str(challenges) if challenges else None,
            mentions=tuple(counts.items()),
        )


@dataclass(frozen=True)
class EdgeRecord:
    """A raw relationship as supplied by the caller (kind not yet normalized)."""
    source: str
    target: str
    relation: str = EdgeKind.SUPPORTS.value

    @staticmethod
    def from_dict(data: Mapping[str, Any], position: int = 0) -> "EdgeRecord":
        if not isinstance(data, Mapping):
            raise InputValidationError(
                f"edges[{position}] must be an object, got {type(data).__name__}"
            )
        source = data.get("from", data.get("source"))
        target = data.get("to", data.get("target"))
        if source is None or target is None:
            raise InputValidationError(
                f"edges[{position}] needs both endpoints ('from'/'to' or 'source'/'target')"
            )
        relation = data.get("type", data.get("kind", ""))
        return EdgeRecord(
            source=str(source).strip(),
            target=str(target).strip(),
            relation=str(relation or ""),
        )


@dataclass(frozen=True)
class EdgeData:
    """A normalized, directed relationship between two known claims."""
    source: str
    target: str
    kind: EdgeKind

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.source, "to": self.target, "type": self.kind.value}


@dataclass(frozen=True)
class AnalysisInput:
    """The aggregate record handed to the pipeline."""
    claims: Tuple[ClaimData, ...] = ()
    edges: Tuple[EdgeRecord, ...] = ()
    ghosts: Tuple[str, ...] = ()
    source_query: Optional[str] = None
    model_count: Optional[int] = None
    input_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.input_id,
            "claims": [c.to_dict() for c in self.claims],
            "edges": [
                {"from": e.source, "to": e.target, "type": e.relation} for e in self.edges
            ],
            "ghosts": list(self.ghosts),
            "sourceQuery": self.source_query,
            "model_count": self.model_count,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "AnalysisInput":
        """
        Validate and convert a raw mapping.

        Raises InputValidationError when required fields are missing or have
        the wrong shape; never for degenerate-but-valid content.
        """
        if not isinstance(data, Mapping):
            raise InputValidationError(
                f"analysis input must be an object, got {type(data).__name__}"
            )
        raw_claims = _require_list(data, "claims")
        raw_edges = _require_list(data, "edges", default=[])
        raw_ghosts = data.get("ghosts") or []
        if not isinstance(raw_ghosts, (list, tuple)):
            raise InputValidationError("'ghosts' must be a list of strings when present")

        model_count = data.get("model_count", data.get("modelCount"))
        if model_count is not None:
            try:
                model_count = int(model_count)
            except (TypeError, ValueError):
                raise InputValidationError("'model_count' must be an integer") from None

        input_id = data.get("id")
        return AnalysisInput(
            claims=tuple(ClaimData.from_dict(c, i) for i, c in enumerate(raw_claims)),
            edges=tuple(EdgeRecord.from_dict(e, i) for i, e in enumerate(raw_edges)),
            ghosts=tuple(str(g) for g in raw_ghosts if g),
            source_query=data.get("sourceQuery", data.get("query")),
            model_count=model_count,
            input_id=str(input_id) if input_id is not None else None,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalize_source_id(value: Any) -> Optional[str]:
    """Numeric and string source identifiers collapse to one string form."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def _require_list(data: Mapping[str, Any], key: str, default: Optional[List[Any]] = None) -> Sequence[Any]:
    if key not in data or data[key] is None:
        if default is not None:
            return default
        raise InputValidationError(f"analysis input is missing required field '{key}'")
    value = data[key]
    if not isinstance(value, (list, tuple)):
        raise InputValidationError(f"'{key}' must be a list, got {type(value).__name__}")
    return value
