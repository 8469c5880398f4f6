from __future__ import annotations

import re
from typing import Iterable, Literal, Sequence

from .models import StableAttribute

# The pattern sets below are pinned policy. Changing one changes which
# attributes are trusted, so every edit needs a matching test update.

PRIORITY_ATTRS = ("id", "name", "title", "alt", "role", "type")
BOOLEAN_ATTRS = ("checked", "selected", "disabled", "readonly")
SEMANTIC_REFERENCE_ATTRS = (
    "aria-labelledby",
    "aria-describedby",
    "aria-controls",
    "aria-owns",
    "for",
    "form",
    "list",
    "headers",
)

STABLE_DATA_ATTRS = (
    "data-testid",
    "data-test",
    "data-cy",
    "data-qa",
    "data-automation",
    "data-role",
    "data-action",
    "data-target",
    "data-toggle",
    "data-dismiss",
    "data-placement",
    "data-content",
    "data-original-title",
)

_RANDOM_VALUE_PATTERNS = (
    re.compile(r"^[a-f0-9]{8}$", re.IGNORECASE),
    re.compile(r"^[a-f0-9]{6,}$", re.IGNORECASE),
    re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE),
    re.compile(r"^[a-z][0-9a-f]{7}$", re.IGNORECASE),
    re.compile(r"^[a-z]{2}[0-9a-f]{6}$", re.IGNORECASE),
    re.compile(r"^[a-z0-9]{8,12}$", re.IGNORECASE),
    re.compile(r"^[a-z]+-[a-f0-9]{5,}$", re.IGNORECASE),
    re.compile(r"^_[a-f0-9]{5,}$", re.IGNORECASE),
    re.compile(r"^react-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^vue-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^ng-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^component-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^auto-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^gen-[a-z0-9-]+$", re.IGNORECASE),
)

_FRAMEWORK_ATTR_NAME_PATTERNS = (
    re.compile(r"^data-v-[a-f0-9]{8}$", re.IGNORECASE),
    re.compile(r"^data-react", re.IGNORECASE),
    re.compile(r"^_ng(content|host)-[a-z0-9-]+$", re.IGNORECASE),
)

_DYNAMIC_ATTR_NAME_PATTERNS = (
    re.compile(r"^data-[a-z]+-[a-f0-9]{6,}$", re.IGNORECASE),
    re.compile(r"^[a-z]+-[a-f0-9]{8}$", re.IGNORECASE),
    re.compile(r"^data-styled-[a-z0-9]+$", re.IGNORECASE),
    re.compile(r"^data-emotion-[a-z0-9]+$", re.IGNORECASE),
    re.compile(r"^data-css-[a-z0-9]+$", re.IGNORECASE),
)

_DATA_HASH_PATTERNS = (
    re.compile(r"^[a-f0-9]{6,}$", re.IGNORECASE),
    re.compile(r"^[a-z0-9]+-[a-f0-9]{5,}$", re.IGNORECASE),
    re.compile(r"^\d+$"),
)

_GENERATED_NAME_PATTERNS = (
    # generic random shapes
    re.compile(r"^[a-f0-9]{6,}$", re.IGNORECASE),
    re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE),
    re.compile(r"^\d+$"),
    re.compile(r"^[a-z0-9]+-[a-f0-9]{5,}$", re.IGNORECASE),
    re.compile(r"^[a-z]+_[a-f0-9]{5,}$", re.IGNORECASE),
    re.compile(r"^_[a-f0-9]{5,}$", re.IGNORECASE),
    re.compile(r"^[a-f0-9]{4,8}-[a-f0-9]{4,8}$", re.IGNORECASE),
    re.compile(r"^[a-z]{1,3}[0-9a-f]{6,}$", re.IGNORECASE),
    # css-in-js
    re.compile(r"^css-[a-z0-9]+$", re.IGNORECASE),
    re.compile(r"^sc-[a-z0-9]+$", re.IGNORECASE),
    re.compile(r"^jsx-[a-z0-9]+$", re.IGNORECASE),
    re.compile(r"emotion-[a-z0-9]+$", re.IGNORECASE),
    re.compile(r"^__[a-z0-9-]+$", re.IGNORECASE),
    # react
    re.compile(r"^react-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^[a-z]+-[0-9a-z]{6,}-[0-9a-z]{6,}$", re.IGNORECASE),
    # vue
    re.compile(r"^data-v-[a-f0-9]{8}$", re.IGNORECASE),
    re.compile(r"^vue-[a-z0-9-]+$", re.IGNORECASE),
    # angular
    re.compile(r"^ng-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^_ngcontent-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^_nghost-[a-z0-9-]+$", re.IGNORECASE),
    # material-ui / jss
    re.compile(r"^MuiBox-root-\d+$"),
    re.compile(r"^makeStyles-[a-z]+-\d+$"),
    re.compile(r"^jss\d+$", re.IGNORECASE),
    # ant design
    re.compile(r"^ant-[a-z]+-[a-f0-9]{6,}$", re.IGNORECASE),
    # tailwind arbitrary values
    re.compile(r"^[a-z]+-\[[a-f0-9#%]+\]$", re.IGNORECASE),
    # hashed BEM / camel case
    re.compile(r"^[A-Z][a-z]*__[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^[a-z]+[A-Z][a-z]*_[a-f0-9]{5,}$", re.IGNORECASE),
    re.compile(r"^[a-z]+-[a-z]+-[a-f0-9]{5,}$", re.IGNORECASE),
    # short random ids
    re.compile(r"^[a-z][0-9a-f]{7}$", re.IGNORECASE),
    re.compile(r"^[a-z]{2}[0-9a-f]{6}$", re.IGNORECASE),
    re.compile(r"^[0-9a-f]{8}$", re.IGNORECASE),
    re.compile(r"^[a-z0-9]{8,12}$", re.IGNORECASE),
)

_GENERATED_ID_PATTERNS = (
    re.compile(r"^react-", re.IGNORECASE),
    re.compile(r"^vue-", re.IGNORECASE),
    re.compile(r"^ng-", re.IGNORECASE),
    re.compile(r"^root-\d+$", re.IGNORECASE),
    re.compile(r"^app-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^component-[a-z0-9-]+$", re.IGNORECASE),
)

_RANDOM_CLASS_PATTERNS = (
    re.compile(r"^__[a-z]+-[a-z0-9-]+$", re.IGNORECASE),
    re.compile(r"^[a-z]+-[a-f0-9]{5,}$", re.IGNORECASE),
    re.compile(r"^_[a-f0-9]{5,}$", re.IGNORECASE),
)


def normalize_space(value: str | None, limit: int = 200) -> str:
    if not value:
        return ""
    compact = re.sub(r"\s+", " ", str(value)).strip()
    return compact[:limit] if compact else ""


def split_classes(raw: Sequence[str] | str | None) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        items = raw.split()
    else:
        items = [item for item in raw if isinstance(item, str)]
    return [item.strip() for item in items if item.strip()]


def xpath_literal(value: str | None) -> str:
    text = value or ""
    if not text:
        return "''"
    if "'" in text and '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    pieces = [f"'{piece}'" for piece in text.split("'")]
    return "concat(" + ", \"'\", ".join(pieces) + ")"


def is_random_generated_value(value: str | None) -> bool:
    if not value or not isinstance(value, str):
        return False
    text = value.strip()
    return any(pattern.search(text) for pattern in _RANDOM_VALUE_PATTERNS)


def is_framework_attribute(name: str, value: str = "") -> bool:
    if any(pattern.search(name) for pattern in _FRAMEWORK_ATTR_NAME_PATTERNS):
        return True
    if is_random_generated_value(value) and name in SEMANTIC_REFERENCE_ATTRS:
        return True
    return any(pattern.search(name) for pattern in _DYNAMIC_ATTR_NAME_PATTERNS)


def is_stable_data_attribute(name: str, value: str) -> bool:
    if not name.startswith("data-"):
        return False
    if name in STABLE_DATA_ATTRS:
        return True
    looks_like_hash = any(pattern.search(value) for pattern in _DATA_HASH_PATTERNS)
    return not looks_like_hash and len(value) > 0


def filter_framework_generated_names(
    names: Iterable[str],
    kind: Literal["class", "id"] = "class",
) -> list[str]:
    kept: list[str] = []
    for name in names:
        if not name or len(name) < 2:
            continue
        if any(pattern.search(name) for pattern in _GENERATED_NAME_PATTERNS):
            continue
        if kind == "id" and any(pattern.search(name) for pattern in _GENERATED_ID_PATTERNS):
            continue
        kept.append(name)
    return kept


def filtered_classes(class_name: Sequence[str] | str | None) -> list[str]:
    return filter_framework_generated_names(split_classes(class_name), "class")


def valid_id(id_value: str | None) -> str | None:
    if not id_value:
        return None
    return id_value if filter_framework_generated_names([id_value], "id") else None


def is_valid_id(id_value: str | None) -> bool:
    return valid_id(id_value) is not None


def has_random_classes(class_name: str | None) -> bool:
    return any(
        pattern.search(token)
        for token in split_classes(class_name)
        for pattern in _RANDOM_CLASS_PATTERNS
    )


def stable_attributes(attributes: Iterable[tuple[str, str]]) -> list[StableAttribute]:
    """Trusted attributes, high priority first, then in document order."""
    high: list[StableAttribute] = []
    rest: list[StableAttribute] = []
    for name, value in attributes:
        if is_framework_attribute(name, value):
            continue
        if not value and name not in BOOLEAN_ATTRS:
            continue
        if name in PRIORITY_ATTRS:
            high.insert(0, StableAttribute(name, value, "high"))
        elif (name.startswith("aria-") or name in {"placeholder", "value"}) and not is_random_generated_value(value):
            rest.append(StableAttribute(name, value, "medium"))
        elif name == "class":
            if filtered_classes(value):
                rest.append(StableAttribute(name, value, "low"))
        elif not name.startswith("data-") or is_stable_data_attribute(name, value):
            rest.append(StableAttribute(name, value, "low"))
    return high + rest
