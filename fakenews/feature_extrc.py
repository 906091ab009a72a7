import re
import logging

import pandas as pd

from fakenews.config import CONTRACTIONS, SUBJECT_TO_DOMAIN, DEFAULT_DOMAIN


logger = logging.getLogger(__name__)


def _contraction_pattern(forms, whole_word: bool) -> re.Pattern:
    # longest first so "can't" wins over "n't"
    alternatives = '|'.join(re.escape(f) for f in sorted(forms, key=len, reverse=True))
    if whole_word:
        return re.compile(r"\b(" + alternatives + r")\b")
    return re.compile(r"(" + alternatives + r")\b")


SPECIFIC_CONTRACTIONS = CONTRACTIONS['specific']
SUFFIX_CONTRACTIONS = CONTRACTIONS['suffixes']

_SPECIFIC_RE = _contraction_pattern(SPECIFIC_CONTRACTIONS, whole_word=True)
_SUFFIX_RE = _contraction_pattern(SUFFIX_CONTRACTIONS, whole_word=False)


def expand_contractions(text: str) -> str:
    """Expand English contractions in lower-cased text ("don't" -> "do not")."""
    text = re.sub(r"[‘’ʼ`]", "'", text)
    text = _SPECIFIC_RE.sub(lambda m: SPECIFIC_CONTRACTIONS[m.group(1)], text)
    text = _SUFFIX_RE.sub(lambda m: SUFFIX_CONTRACTIONS[m.group(1)], text)
    return text


def clean_text(text: str) -> str:
    """
    Clean and normalize a single article body.

    Parameters
    ----------
    text : str
        Raw article text.

    Returns
    -------
    str
        Text made only of lowercase letters separated by single spaces.

    Notes
    -----
    Steps:
    1. NaN/None become an empty string.
    2. Lowercase.
    3. Expand contractions.
    4. Remove every character that is not a lowercase letter or whitespace.
    5. Collapse whitespace runs into a single space and strip.
    """
    if text is None or (not isinstance(text, str) and pd.isna(text)):
        return ""

    text = str(text).lower()

    text = expand_contractions(text)

    # Letters and whitespace only
    text = re.sub(r'[^a-z\s]', '', text)

    text = re.sub(r'\s+', ' ', text).strip()

    return text


#=====================================================================================================
# DOMAIN CATEGORIES
#=====================================================================================================


def categorize_subject(subject: str, mapping: dict | None = None, default: str = DEFAULT_DOMAIN) -> str:
    """Map a subject string (e.g. 'politicsNews') into its domain ('Politics')."""
    mapping = SUBJECT_TO_DOMAIN if mapping is None else mapping
    if not isinstance(subject, str):
        return default
    return mapping.get(subject.strip(), default)


def add_domain(df: pd.DataFrame, mapping: dict | None = None, subject_col: str = 'subject') -> pd.DataFrame:
    """Add the derived 'domain' column."""
    temp_df = df.copy()
    temp_df['domain'] = temp_df[subject_col].apply(categorize_subject, mapping=mapping)

    n_other = (temp_df['domain'] == DEFAULT_DOMAIN).sum()
    if n_other:
        logger.info(f"{n_other:,} rows with an unmapped subject categorized as '{DEFAULT_DOMAIN}'")

    return temp_df
