import logging
from pathlib import Path
from typing import Sequence

import pandas as pd
from tqdm import tqdm

from fakenews.feature_extrc import clean_text


logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['title', 'text', 'subject', 'date']


def _read_collection(path: str | Path, label: int, **kwargs) -> pd.DataFrame:
    df = pd.read_csv(path, **kwargs)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing columns {missing}")

    df = df[REQUIRED_COLUMNS].copy()
    df['label'] = label
    return df


def load_data(
    fake_path: str | Path,
    true_path: str | Path,
    **kwargs
) -> pd.DataFrame:
    """
    Load the fake and real article collections and label them.

    Parameters
    ----------
    fake_path : str | Path
        CSV file with fake articles (label 0).
    true_path : str | Path
        CSV file with real articles (label 1).
    **kwargs
        Additional arguments to pass to pd.read_csv().

    Returns
    -------
    pd.DataFrame
        Columns title, text, subject, date, label; fake rows first.
    """
    fake_df = _read_collection(fake_path, label=0, **kwargs)
    logger.info(f"Fake set: {fake_df.shape[0]:,} samples")

    true_df = _read_collection(true_path, label=1, **kwargs)
    logger.info(f"Real set: {true_df.shape[0]:,} samples")

    return pd.concat([fake_df, true_df], ignore_index=True)


def parse_dates(dates: pd.Series) -> pd.Series:
    """Parse mixed-format date strings; anything unparseable becomes NaT."""
    return pd.to_datetime(dates.astype('string').str.strip(), errors='coerce', format='mixed')


def drop_duplicate_texts(df: pd.DataFrame, subset: Sequence[str] = ('text',)) -> pd.DataFrame:
    """Keep the first occurrence of every normalized text."""
    subset = list(subset)
    duplicated = df.duplicated(subset=subset, keep='first')

    conflicting = df[df.duplicated(subset=subset, keep=False)].groupby(subset)['label'].nunique()
    n_conflicting = int((conflicting > 1).sum())
    if n_conflicting:
        logger.info(f"  {n_conflicting:,} duplicated texts carry both labels, the first label is kept")

    return df[~duplicated]


def preprocess_data(df: pd.DataFrame, progress: bool = True) -> pd.DataFrame:
    """
    Clean the labeled articles:
    - Drops rows with missing or blank text.
    - Parses 'date' and drops rows whose date cannot be parsed.
    - Normalizes 'text' with clean_text and drops rows left empty.
    - Drops duplicates on the normalized text, keeping the first one.

    Parameters
    ----------
    df : pd.DataFrame
        Output of load_data.
    progress : bool
        Show a tqdm progress bar while cleaning text.
    """
    temp_df = df.copy()
    original_len = temp_df.shape[0]

    logger.info("Dropping rows with missing text...")
    has_text = temp_df['text'].notna() & temp_df['text'].astype('string').str.strip().ne('')
    temp_df = temp_df[has_text.fillna(False).astype(bool)].copy()
    logger.info(f"  {original_len - temp_df.shape[0]:,} samples removed")
    original_len = temp_df.shape[0]

    logger.info("Parsing dates...")
    temp_df['date'] = parse_dates(temp_df['date'])
    temp_df = temp_df[temp_df['date'].notna()].copy()
    logger.info(f"  {original_len - temp_df.shape[0]:,} samples removed")
    original_len = temp_df.shape[0]

    logger.info("Normalizing text...")
    if progress:
        tqdm.pandas(desc="clean_text")
        temp_df['text'] = temp_df['text'].progress_apply(clean_text)
    else:
        temp_df['text'] = temp_df['text'].apply(clean_text)
    temp_df = temp_df[temp_df['text'] != '']
    logger.info(f"  {original_len - temp_df.shape[0]:,} samples empty after cleaning")
    original_len = temp_df.shape[0]

    logger.info("Dropping duplicated texts...")
    temp_df = drop_duplicate_texts(temp_df)
    logger.info(f"  {original_len - temp_df.shape[0]:,} samples removed")

    temp_df = temp_df.reset_index(drop=True)
    logger.info(f"Preprocessed data: {temp_df.shape[0]:,} samples, {temp_df.shape[1]} columns")

    return temp_df
