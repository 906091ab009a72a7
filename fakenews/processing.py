import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, TfidfVectorizer
from sklearn.model_selection import train_test_split

from fakenews.config import RANDOM_STATE, TEST_SIZE, TFIDF_PARAMS


logger = logging.getLogger(__name__)


#=====================================================================================================
# SPLIT
#=====================================================================================================


def split_data(
    df: pd.DataFrame,
    test_size: float = TEST_SIZE,
    random_state: int = RANDOM_STATE
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Random, seeded, non-stratified train/test split over the rows."""
    train_df, test_df = train_test_split(
        df, test_size=test_size, shuffle=True, stratify=None, random_state=random_state
    )
    logger.info(f"  Train: {len(train_df):,} samples")
    logger.info(f"  Test: {len(test_df):,} samples")
    return train_df, test_df


#=====================================================================================================
# VECTORIZER
#=====================================================================================================


def build_stop_words(extra: Iterable[str] = ()) -> List[str]:
    """English stop words plus manually excluded tokens, single letters left out."""
    words = set(ENGLISH_STOP_WORDS) | set(extra)
    # the token pattern already drops one-letter tokens
    return sorted(w for w in words if len(w) > 1)


@dataclass
class NewsVectorizer(BaseEstimator, TransformerMixin):
    """
    TF-IDF document-term matrices over cleaned article text.

    The vocabulary and the IDF weights are learnt in fit() from the training
    texts only; transform() reuses them unchanged, so terms never seen during
    fit are ignored.

    Parameters
    ----------
    ngram_range : tuple
        (1, 1) for unigrams, (1, 2) for unigrams and bigrams.
    min_df : int | float
        Minimum number (or proportion) of documents a term must appear in.
    max_df : int | float
        Maximum proportion (or number) of documents a term may appear in.
    token_pattern : str
        Regex selecting tokens; the default keeps words of two or more letters.
    extra_stop_words : list
        Tokens removed on top of the English stop-word list.
    """

    ngram_range: Tuple[int, int] = (1, 1)
    min_df: int | float = TFIDF_PARAMS['min_df']
    max_df: int | float = TFIDF_PARAMS['max_df']
    token_pattern: str = TFIDF_PARAMS['token_pattern']
    extra_stop_words: List[str] = field(default_factory=lambda: list(TFIDF_PARAMS['extra_stop_words']))

    def __post_init__(self):
        self.tfidf_ = None
        self.document_frequency_ = None

    def _check_fitted(self):
        if self.tfidf_ is None:
            raise ValueError("Fit the vectorizer before calling transform.")

    def fit(self, X, y=None) -> 'NewsVectorizer':
        self.fit_transform(X, y)
        return self

    def fit_transform(self, X, y=None, **fit_params) -> csr_matrix:
        self.tfidf_ = TfidfVectorizer(
            ngram_range=tuple(self.ngram_range),
            min_df=self.min_df,
            max_df=self.max_df,
            token_pattern=self.token_pattern,
            stop_words=build_stop_words(self.extra_stop_words),
            lowercase=False,
        )
        X_tfidf = self.tfidf_.fit_transform(X)
        self.document_frequency_ = np.asarray((X_tfidf > 0).sum(axis=0)).ravel()

        logger.info(f"  TF-IDF {tuple(self.ngram_range)}: {X_tfidf.shape[1]:,} terms")
        return X_tfidf

    def transform(self, X) -> csr_matrix:
        self._check_fitted()
        return self.tfidf_.transform(X)

    def get_feature_names_out(self, input_features=None) -> np.ndarray:
        self._check_fitted()
        return self.tfidf_.get_feature_names_out()

    @property
    def vocabulary_size(self) -> int:
        self._check_fitted()
        return len(self.tfidf_.vocabulary_)

    def vocabulary_frame(self) -> pd.DataFrame:
        """Term, column index, training document frequency and idf weight."""
        self._check_fitted()
        names = self.tfidf_.get_feature_names_out()
        return pd.DataFrame({
            'term': names,
            'index': np.arange(len(names)),
            'doc_freq': self.document_frequency_,
            'idf': self.tfidf_.idf_,
        }).sort_values('doc_freq', ascending=False).reset_index(drop=True)
