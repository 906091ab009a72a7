import numpy as np
import pandas as pd
import pytest


FAKE_WORDS = ['shocking', 'hoax', 'exposed', 'breaking', 'outrage', 'secret', 'viral', 'insane']
REAL_WORDS = ['officials', 'ministry', 'statement', 'parliament', 'agency', 'spokesman', 'reuters', 'committee']
SHARED_WORDS = ['government', 'country', 'people', 'week', 'policy', 'report', 'election', 'leader']

# degenerate pruning so tiny corpora keep a vocabulary
TOY_TFIDF_PARAMS = {
    'min_df': 1,
    'max_df': 1.0,
    'token_pattern': r'(?u)\b[a-z]{2,}\b',
    'extra_stop_words': ['said'],
}
TOY_LGBM_PARAMS = {'min_child_samples': 1, 'min_data_in_bin': 1}


def make_collection(words, subjects, n, rng):
    texts = []
    for _ in range(n):
        tokens = list(rng.choice(words, size=6)) + list(rng.choice(SHARED_WORDS, size=4))
        rng.shuffle(tokens)
        texts.append(' '.join(tokens).capitalize() + '.')
    return pd.DataFrame({
        'title': [f"Title {i}" for i in range(n)],
        'text': texts,
        'subject': [subjects[i % len(subjects)] for i in range(n)],
        'date': [f"January {i % 28 + 1}, 2017" for i in range(n)],
    })


@pytest.fixture
def synthetic_collections():
    rng = np.random.default_rng(0)
    fake = make_collection(FAKE_WORDS, ['News', 'politics'], 30, rng)
    real = make_collection(REAL_WORDS, ['worldnews', 'politicsNews'], 30, rng)
    return fake, real


@pytest.fixture
def synthetic_csvs(tmp_path, synthetic_collections):
    fake, real = synthetic_collections
    fake_path = tmp_path / "Fake.csv"
    true_path = tmp_path / "True.csv"
    fake.to_csv(fake_path, index=False)
    real.to_csv(true_path, index=False)
    return fake_path, true_path


@pytest.fixture
def clean_corpus(synthetic_collections):
    """Already normalized articles with labels and domains, as preprocess + add_domain return them."""
    from fakenews.feature_extrc import add_domain
    from fakenews.preproc import preprocess_data

    fake, real = synthetic_collections
    df = pd.concat([fake.assign(label=0), real.assign(label=1)], ignore_index=True)
    return add_domain(preprocess_data(df, progress=False))


@pytest.fixture
def raw_articles():
    return pd.DataFrame([
        {'title': 'a', 'text': "Hello, World! Don't panic.", 'subject': 'News',
         'date': 'December 31, 2017', 'label': 0},
        {'title': 'b', 'text': 'hello   world do not PANIC', 'subject': 'politics',
         'date': 'Dec 30, 2017', 'label': 0},
        {'title': 'c', 'text': None, 'subject': 'News',
         'date': 'December 29, 2017', 'label': 0},
        {'title': 'd', 'text': '   ', 'subject': 'News',
         'date': 'December 28, 2017', 'label': 0},
        {'title': 'e', 'text': 'Valid text here', 'subject': 'worldnews',
         'date': 'not a date', 'label': 1},
        {'title': 'f', 'text': 'Officials confirmed the plan (Reuters)', 'subject': 'politicsNews',
         'date': '19-Feb-18', 'label': 1},
        {'title': 'g', 'text': '12345 !!!', 'subject': 'worldnews',
         'date': 'December 27, 2017', 'label': 1},
        {'title': 'h', 'text': 'World leaders\n\tmeet', 'subject': 'worldnews',
         'date': 'January 5, 2017 ', 'label': 1},
    ])


@pytest.fixture
def toy_articles():
    """Four cleaned articles, two fake and two real."""
    return pd.DataFrame({
        'title': ['t1', 't2', 't3', 't4'],
        'text': [
            'shocking hoax exposed today',
            'secret viral outrage revealed',
            'officials confirmed ministry statement',
            'parliament committee approved agency budget',
        ],
        'subject': ['News', 'politics', 'worldnews', 'politicsNews'],
        'date': pd.to_datetime(['2017-01-01', '2017-01-02', '2017-01-03', '2017-01-04']),
        'label': [0, 0, 1, 1],
        'domain': ['News', 'Politics', 'News', 'Politics'],
    })
