import numpy as np
import pandas as pd
import pytest

from fakenews.feature_extrc import add_domain, categorize_subject, clean_text, expand_contractions


@pytest.mark.parametrize("raw, expected", [
    ("Don't STOP!! 123 café\n\tnow", "do not stop caf now"),
    ("He won't go, it's late", "he will not go it is late"),
    ("They’re here and we've seen it", "they are here and we have seen it"),
    ("I'm sure you'll agree", "i am sure you will agree"),
    ("U.S.-backed   forces", "usbacked forces"),
    ("  multiple\n\nlines  ", "multiple lines"),
])
def test_clean_text(raw, expected):
    assert clean_text(raw) == expected


@pytest.mark.parametrize("value", [None, np.nan, ""])
def test_clean_text_missing(value):
    assert clean_text(value) == ""


def test_expand_contractions_leaves_possessive():
    assert expand_contractions("trump's plan can't wait") == "trump's plan cannot wait"


@pytest.mark.parametrize("subject, domain", [
    ('politicsNews', 'Politics'),
    ('politics', 'Politics'),
    ('Government News', 'Politics'),
    ('left-news', 'Politics'),
    ('worldnews', 'News'),
    ('News', 'News'),
    ('US_News', 'News'),
    ('Middle-east', 'News'),
    ('sports', 'Other'),
    (None, 'Other'),
])
def test_categorize_subject(subject, domain):
    assert categorize_subject(subject) == domain


def test_categorize_subject_custom_table():
    assert categorize_subject('tech', mapping={'tech': 'Technology'}) == 'Technology'


def test_add_domain():
    df = pd.DataFrame({'subject': ['politicsNews', 'worldnews', 'unknown']})
    out = add_domain(df)

    assert list(out['domain']) == ['Politics', 'News', 'Other']
    assert 'domain' not in df.columns
