from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

AttributePriority = Literal["high", "medium", "low"]


@dataclass(frozen=True, slots=True)
class Rect:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True, slots=True)
class ComputedStyle:
    display: str = "block"
    visibility: str = "visible"
    opacity: str = "1"

    @property
    def hides_content(self) -> bool:
        return self.display == "none" or self.visibility == "hidden" or _is_zero_opacity(self.opacity)


@dataclass(frozen=True, slots=True)
class StableAttribute:
    name: str
    value: str
    priority: AttributePriority


@dataclass(frozen=True, slots=True)
class AttributeTiers:
    all: dict[str, str]
    priority: tuple[tuple[str, str], ...]
    data: tuple[tuple[str, str], ...]
    aria: tuple[tuple[str, str], ...]
    framework: tuple[tuple[str, str], ...]
    stable: tuple[StableAttribute, ...]

    @property
    def count(self) -> int:
        return len(self.all)

    @property
    def stable_count(self) -> int:
        return len(self.stable)


@dataclass(frozen=True, slots=True)
class SvgInfo:
    is_root: bool
    svg_element: Any
    view_box: str | None
    view_box_attr: str
    width: str | None
    height: str | None
    title_text: str
    desc_text: str
    path_count: int
    use_count: int
    use_href: str | None
    aria_label: str

    @property
    def has_title(self) -> bool:
        return bool(self.title_text)

    @property
    def has_desc(self) -> bool:
        return bool(self.desc_text)

    @property
    def has_aria_label(self) -> bool:
        return bool(self.aria_label)


@dataclass(frozen=True, slots=True)
class BasicInfo:
    tag: str
    id: str | None
    class_name: str | None
    type: str | None
    role: str | None
    is_visible: bool
    is_interactive: bool
    is_svg: bool
    svg: SvgInfo | None


@dataclass(frozen=True, slots=True)
class TextInfo:
    direct: str
    full: str
    inner: str

    @property
    def has_text(self) -> bool:
        return bool(self.direct)

    @property
    def length(self) -> int:
        return len(self.direct)

    @property
    def is_text_only(self) -> bool:
        return self.direct == self.full

    @property
    def words(self) -> tuple[str, ...]:
        return tuple(word for word in self.direct.split() if word)


@dataclass(frozen=True, slots=True)
class PositionInfo:
    rect: Rect
    sibling_index: int
    same_tag_index: int
    depth: int
    has_parent: bool
    has_siblings: bool


@dataclass(frozen=True, slots=True)
class NodeSummary:
    tag: str
    id: str | None
    class_name: str | None


@dataclass(frozen=True, slots=True)
class ContextInfo:
    parent: NodeSummary | None
    children: tuple[NodeSummary, ...]
    in_form: bool
    in_table: bool
    in_list: bool
    in_shadow_scope: bool

    @property
    def child_count(self) -> int:
        return len(self.children)


@dataclass(frozen=True, slots=True)
class AccessibilityInfo:
    has_aria_label: bool
    has_aria_describedby: bool
    has_title: bool
    has_alt: bool
    role: str | None
    tab_index: int
    is_labelled: bool


@dataclass(frozen=True, slots=True)
class FrameworkInfo:
    type: str
    attributes: tuple[str, ...]

    @property
    def has_framework_data(self) -> bool:
        return bool(self.attributes)


@dataclass(frozen=True, slots=True)
class UniquenessInfo:
    unique_attributes: tuple[str, ...]

    @property
    def has_unique_id(self) -> bool:
        return "id" in self.unique_attributes

    @property
    def score(self) -> int:
        return len(self.unique_attributes)


@dataclass(frozen=True, slots=True)
class FeatureSnapshot:
    basic: BasicInfo
    attributes: AttributeTiers
    text: TextInfo
    position: PositionInfo
    context: ContextInfo
    accessibility: AccessibilityInfo
    framework: FrameworkInfo
    uniqueness: UniquenessInfo


@dataclass(frozen=True, slots=True)
class Candidate:
    strategy: str
    expression: str
    score: int
    priority: int
    provisional: bool = False

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "strategy": self.strategy,
            "expression": self.expression,
            "score": self.score,
        }
        if self.provisional:
            record["provisional"] = True
        return record


@dataclass(frozen=True, slots=True)
class GenerationContext:
    """Shared per-node state handed to every strategy."""

    snapshot: FeatureSnapshot
    framework: str
    in_shadow_scope: bool
    element_type: str
    oracle: Any
    adapter: Any
    analyzer: Any
    config: Any

    @property
    def policy(self) -> Any:
        return self.config.scoring


@dataclass(slots=True)
class RankedResult:
    primary: Candidate | None
    alternatives: list[Candidate]
    candidates: list[Candidate]
    applicable: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)
    context: GenerationContext | None = None

    @property
    def success(self) -> bool:
        return self.primary is not None


@dataclass(frozen=True, slots=True)
class ElementInfo:
    tag: str
    text: str
    id: str | None
    class_name: str | None

    def to_record(self) -> dict[str, Any]:
        return {"tag": self.tag, "text": self.text, "id": self.id, "className": self.class_name}


@dataclass(frozen=True, slots=True)
class GenerationResult:
    success: bool
    primary: Candidate | None
    alternatives: tuple[Candidate, ...]
    element: ElementInfo | None
    snapshot: FeatureSnapshot | None
    timestamp: float
    error: str | None = None

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "success": self.success,
            "primary": self.primary.to_record() if self.primary else None,
            "alternatives": [item.to_record() for item in self.alternatives],
            "element": self.element.to_record() if self.element else None,
        }
        if self.error:
            record["error"] = self.error
        return record


@dataclass(frozen=True, slots=True)
class ValidationReport:
    valid: bool
    unique: bool
    correct: bool
    match_count: int
    message: str


@dataclass(slots=True)
class CacheEntry:
    key: str
    payload: Any
    created_at: float


def _is_zero_opacity(value: str) -> bool:
    try:
        return float(value) == 0.0
    except (TypeError, ValueError):
        return False
