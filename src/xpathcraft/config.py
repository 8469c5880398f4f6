from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ScoringPolicy:
    """Bonuses and penalties applied on top of each strategy's priority."""

    text_base_bonus: int = 100
    text_length_bonuses: tuple[tuple[int, int], ...] = ((10, 50), (20, 30), (30, 5))
    text_button_bonus: int = 50
    text_link_bonus: int = 30
    text_unique_short_bonus: int = 100
    text_unique_short_limit: int = 15

    attribute_id_bonus: int = 50
    attribute_name_bonus: int = 30
    attribute_class_bonus: int = 10
    attribute_class_bonus_cap: int = 30

    anchor_count_bonus: int = 5
    anchor_count_cap: int = 25
    anchor_best_cap: int = 25

    container_per_container_bonus: int = 10
    container_id_bonus: int = 20

    shadow_base_bonus: int = 20
    shadow_id_bonus: int = 30
    shadow_name_bonus: int = 20
    shadow_short_text_bonus: int = 15
    shadow_short_text_limit: int = 20

    svg_aria_label_bonus: int = 40
    svg_title_bonus: int = 30
    svg_desc_bonus: int = 25
    svg_labelled_parent_bonus: int = 20
    svg_view_box_bonus: int = 15
    svg_class_bonus: int = 10

    relative_ancestor_id_bonus: int = 20
    relative_depth_ceiling: int = 20

    random_class_penalty: int = 50
    fallback_score: int = 1


@dataclass(frozen=True, slots=True)
class SynthesisConfig:
    result_ttl_seconds: float = 10.0
    feature_ttl_seconds: float = 5.0
    max_text_length: int = 50
    anchor_text_length: int = 30
    anchor_max_ancestor_depth: int = 3
    svg_label_search_depth: int = 3
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)


DEFAULT_CONFIG = SynthesisConfig()
