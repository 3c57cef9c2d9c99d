"""
Column Profiler - Heuristic column role detection.

Classifies each column as protected attribute, target and/or numeric from its
header and the first sampled non-empty values. Never raises: empty role lists
are valid and left for the caller to escalate.
"""

from typing import Iterable, List

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.constants import (
    ACTUAL_COLUMN_SUFFIX,
    DEMOGRAPHIC_KEYWORDS,
    FALLBACK_TARGET_COUNT,
    HEADER_SEPARATORS,
    PROFILE_SAMPLE_SIZE,
)
from shared.logging import get_logger
from shared.schemas import ColumnProfile, ColumnProfileSummary

from .dataset import Dataset

logger = get_logger(__name__)


def _strip_separators(text: str) -> str:
    for sep in HEADER_SEPARATORS:
        text = text.replace(sep, "")
    return text


def header_matches(header: str, keywords: Iterable[str]) -> bool:
    """
    Case-insensitive substring match of any keyword against a header.

    The header is also tried with separators stripped, so 'is_female'
    and 'isFemale' both match 'female'.
    """
    lowered = header.strip().lower()
    compact = _strip_separators(lowered)
    for keyword in keywords:
        keyword = keyword.strip().lower()
        if not keyword:
            continue
        if keyword in lowered or _strip_separators(keyword) in compact:
            return True
    return False


def is_protected_column(header: str, config: AnalysisConfig = DEFAULT_CONFIG) -> bool:
    if header_matches(header, config.protected_attribute_keywords):
        return True
    return config.use_demographic_fallback and header_matches(header, DEMOGRAPHIC_KEYWORDS)


def is_target_column(header: str, config: AnalysisConfig = DEFAULT_CONFIG) -> bool:
    # Ground-truth columns pair with a target, they are not targets themselves
    if header.strip().lower().endswith(ACTUAL_COLUMN_SUFFIX):
        return False
    return header_matches(header, config.target_keywords)


def is_numeric_column(dataset: Dataset, column: str,
                      sample_size: int = PROFILE_SAMPLE_SIZE) -> bool:
    """All sampled non-empty values are numbers (and at least one exists)."""
    samples = dataset.sample_values(column, sample_size)
    return bool(samples) and all(cell.is_number for cell in samples)


def profile_columns(
    dataset: Dataset,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> ColumnProfileSummary:
    """
    Classify every column of a dataset.

    When no header matches a target keyword, the last two numeric columns are
    used as fallback targets and the summary is marked `targets_are_fallback`.

    Args:
        dataset: Dataset snapshot
        config: Analysis configuration (keyword sets)

    Returns:
        ColumnProfileSummary with per-column profiles and role lists
    """
    profiles: List[ColumnProfile] = []

    for column in dataset.columns:
        profiles.append(ColumnProfile(
            name=column,
            is_protected=is_protected_column(column, config),
            is_target=is_target_column(column, config),
            is_numeric=is_numeric_column(dataset, column),
        ))

    protected = [p.name for p in profiles if p.is_protected]
    targets = [p.name for p in profiles if p.is_target]
    numeric = [p.name for p in profiles if p.is_numeric]

    fallback = False
    if not targets and numeric:
        targets = numeric[-FALLBACK_TARGET_COUNT:]
        fallback = True
        profiles = [
            ColumnProfile(p.name, p.is_protected, p.name in targets, p.is_numeric)
            for p in profiles
        ]
        logger.warning(
            f"No target column matched the configured keywords; "
            f"falling back to numeric columns {targets} (low confidence)"
        )

    logger.info(
        f"Profiled {len(profiles)} columns: protected={protected}, "
        f"targets={targets}, numeric={len(numeric)}"
    )

    return ColumnProfileSummary(
        profiles=tuple(profiles),
        protected_attributes=tuple(protected),
        target_columns=tuple(targets),
        numeric_columns=tuple(numeric),
        all_columns=tuple(dataset.columns),
        targets_are_fallback=fallback,
    )
