"""
Analysis configuration.

An immutable value passed explicitly into every analysis stage. Defaults come
from shared.constants; overrides are per invocation via with_overrides().
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple

from shared.constants import (
    PROTECTED_ATTRIBUTE_KEYWORDS,
    TARGET_KEYWORDS,
    DISPARATE_IMPACT_THRESHOLD,
    STATISTICAL_PARITY_THRESHOLD,
    EQUAL_OPPORTUNITY_THRESHOLD,
    DECISION_THRESHOLD,
    INDIVIDUAL_FAIRNESS_LIMIT,
    COUNTERFACTUAL_LIMIT,
    SIGNIFICANCE_LEVEL,
)
from shared.validation import (
    validate_keywords,
    validate_positive_int,
    validate_threshold,
)


# Accepted spellings for settings written by other tools
_KEY_ALIASES = {
    "protectedAttributeKeywords": "protected_attribute_keywords",
    "protectedAttributes": "protected_attribute_keywords",
    "targetKeywords": "target_keywords",
    "disparateImpactThreshold": "disparate_impact_threshold",
    "statisticalParityThreshold": "statistical_parity_threshold",
    "equalOpportunityThreshold": "equal_opportunity_threshold",
    "decisionThreshold": "decision_threshold",
    "individualFairnessLimit": "individual_fairness_limit",
    "counterfactualLimit": "counterfactual_limit",
    "significanceLevel": "significance_level",
}


def _split_keywords(keywords: Iterable[str]) -> Tuple[FrozenSet[str], Tuple[Any, ...]]:
    """Normalized keywords, plus the entries that are not non-blank strings."""
    if isinstance(keywords, str):
        keywords = [keywords]

    accepted, rejected = set(), []
    for keyword in keywords:
        if isinstance(keyword, str) and keyword.strip():
            accepted.add(keyword.strip().lower())
        else:
            rejected.append(keyword)
    return frozenset(accepted), tuple(rejected)


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Configuration for one fairness analysis.

    Example:
        >>> config = AnalysisConfig().with_overrides(disparate_impact_threshold=0.9)
        >>> config.validate()
        []
    """

    protected_attribute_keywords: FrozenSet[str] = field(
        default_factory=lambda: PROTECTED_ATTRIBUTE_KEYWORDS
    )
    target_keywords: FrozenSet[str] = field(default_factory=lambda: TARGET_KEYWORDS)
    disparate_impact_threshold: float = DISPARATE_IMPACT_THRESHOLD
    statistical_parity_threshold: float = STATISTICAL_PARITY_THRESHOLD
    equal_opportunity_threshold: float = EQUAL_OPPORTUNITY_THRESHOLD
    decision_threshold: float = DECISION_THRESHOLD
    individual_fairness_limit: int = INDIVIDUAL_FAIRNESS_LIMIT
    counterfactual_limit: int = COUNTERFACTUAL_LIMIT
    significance_level: float = SIGNIFICANCE_LEVEL
    use_demographic_fallback: bool = True
    # (field name, entries) dropped during normalization, reported by validate()
    rejected_keywords: Tuple[Tuple[str, Tuple[Any, ...]], ...] = field(
        default=(), init=False, repr=False, compare=False
    )

    def __post_init__(self):
        # Frozen: normalize through object.__setattr__
        rejected = []
        for name in ("protected_attribute_keywords", "target_keywords"):
            keywords, dropped = _split_keywords(getattr(self, name))
            object.__setattr__(self, name, keywords)
            if dropped:
                rejected.append((name, dropped))
        object.__setattr__(self, "rejected_keywords", tuple(rejected))

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        for name, dropped in self.rejected_keywords:
            errors += validate_keywords(name, dropped)
        errors += validate_threshold(
            "disparate_impact_threshold", self.disparate_impact_threshold
        )
        errors += validate_threshold(
            "statistical_parity_threshold", self.statistical_parity_threshold
        )
        errors += validate_threshold(
            "equal_opportunity_threshold", self.equal_opportunity_threshold
        )
        errors += validate_threshold("decision_threshold", self.decision_threshold)
        errors += validate_threshold("significance_level", self.significance_level)
        errors += validate_positive_int(
            "individual_fairness_limit", self.individual_fairness_limit
        )
        errors += validate_positive_int("counterfactual_limit", self.counterfactual_limit)

        return errors

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """Return a copy with the given fields replaced."""
        updated = dataclasses.replace(self, **overrides)
        carried = tuple(
            (name, dropped)
            for name, dropped in self.rejected_keywords
            if name not in overrides
        )
        object.__setattr__(
            updated, "rejected_keywords", carried + updated.rejected_keywords
        )
        return updated

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisConfig":
        """
        Build a config from a settings dictionary.

        Unknown keys raise TypeError, camelCase aliases are accepted.
        """
        kwargs = {}
        for key, value in (data or {}).items():
            name = _KEY_ALIASES.get(key, key)
            kwargs[name] = value

        known = {f.name for f in dataclasses.fields(cls) if f.init}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise TypeError(f"Unknown configuration keys: {unknown}")

        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "protected_attribute_keywords": sorted(self.protected_attribute_keywords),
            "target_keywords": sorted(self.target_keywords),
            "disparate_impact_threshold": self.disparate_impact_threshold,
            "statistical_parity_threshold": self.statistical_parity_threshold,
            "equal_opportunity_threshold": self.equal_opportunity_threshold,
            "decision_threshold": self.decision_threshold,
            "individual_fairness_limit": self.individual_fairness_limit,
            "counterfactual_limit": self.counterfactual_limit,
            "significance_level": self.significance_level,
            "use_demographic_fallback": self.use_demographic_fallback,
        }


DEFAULT_CONFIG = AnalysisConfig()
