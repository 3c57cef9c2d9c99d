"""
History - One summary row per analysis, appended to a CSV log.
"""

from pathlib import Path
from typing import Any, Dict, Union

import pandas as pd

from shared.constants import HISTORY_COLUMNS
from shared.logging import get_logger
from shared.schemas import AnalysisResult

from .bias_flags import risk_level

logger = get_logger(__name__)


def build_history_row(result: AnalysisResult) -> Dict[str, Any]:
    """
    Summary of one analysis.

    Returns:
        Dictionary with timestamp, totals, overall score, flag count and risk level
    """
    score = result.overall_bias_score
    return {
        "timestamp": result.timestamp.isoformat(),
        "total_records": result.total_records,
        "total_groups": result.total_groups,
        "overall_bias_score": score,
        "flag_count": len(result.flags),
        "risk_level": risk_level(score),
    }


def append_history_row(path: Union[str, Path], row: Dict[str, Any]) -> Path:
    """
    Append a summary row to a CSV file, writing the header on first use.

    Args:
        path: CSV file path
        row: Output of build_history_row()

    Returns:
        Path of the history file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    frame = pd.DataFrame([row], columns=HISTORY_COLUMNS)
    write_header = not path.exists() or path.stat().st_size == 0
    frame.to_csv(path, mode="a", header=write_header, index=False)

    logger.info(f"Appended analysis summary to {path}")
    return path


def load_history(path: Union[str, Path]) -> pd.DataFrame:
    """Read the history log (empty frame when the file does not exist)."""
    path = Path(path)
    if not path.exists():
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    return pd.read_csv(path)
