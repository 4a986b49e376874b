from __future__ import annotations


def format_float(value: float) -> float:
    """Round to six decimals so repeated runs serialise identically."""
    return float(f"{value:.6f}")


def format_significant(value: float) -> float:
    # Six significant digits; strains are far below the decimal cut-off
    return float(f"{value:.6g}")
