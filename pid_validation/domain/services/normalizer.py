"""Identifier Normalizer.

Strips everything that is not a decimal digit from identifier values, so that
masked ("123.456.789-09") and unmasked ("12345678909") forms of a national ID
compare equal.

Architecture:
    - Pure functions, no side effects
    - Scalar and vectorized (pandas Series) variants share one pattern
"""

import re

import pandas as pd

NON_DIGIT_PATTERN = re.compile(r'\D', re.ASCII)


def normalize(raw: str) -> str:
    """Remove every character that is not a decimal digit.

    Parameters:
        raw: Raw identifier value

    Returns:
        str: Digits only; empty string when ``raw`` has no digits
    """
    return NON_DIGIT_PATTERN.sub('', raw)


def normalize_series(values: pd.Series) -> pd.Series:
    """Vectorized ``normalize`` for a Series of identifier values.

    Missing values stay missing.

    Parameters:
        values: Series of raw identifier values

    Returns:
        pd.Series: Series of digit-only strings
    """
    return values.astype('string').str.replace(NON_DIGIT_PATTERN, '', regex=True)
