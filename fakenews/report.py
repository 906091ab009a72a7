import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from fakenews.config import (
    DEFAULT_DOMAIN, FAKE_PATH, LABEL_NAMES, MODELS, OUTPUT_DIR, RANDOM_STATE,
    SUBJECT_TO_DOMAIN, TEST_SIZE, TFIDF_PARAMS, THRESHOLD, TOP_N, TRUE_PATH
)
from fakenews.feature_extrc import add_domain
from fakenews.preproc import load_data, preprocess_data
from fakenews.processing import split_data
from fakenews.train_eval import compare_models, plot_label_distribution, train_and_evaluate


logger = logging.getLogger(__name__)


class Report:
    """Ordered Markdown sections; tables are echoed to stdout as they are added."""

    def __init__(self, title: str, base_dir: Optional[str | Path] = None):
        self.title = title
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self._blocks: List[str] = [f"# {title}"]

    def add_heading(self, text: str, level: int = 2) -> None:
        self._blocks.append(f"{'#' * level} {text}")
        print(f"\n{'=' * 70}\n{text.upper()}\n{'=' * 70}")

    def add_text(self, text: str) -> None:
        self._blocks.append(text)
        print(text)

    def add_table(self, df: pd.DataFrame, caption: Optional[str] = None, index: bool = False) -> None:
        table = df.to_string(index=index, float_format=lambda v: f"{v:.4f}")
        if caption:
            self._blocks.append(f"**{caption}**")
            print(f"\n{caption}:")
        self._blocks.append(f"```\n{table}\n```")
        print(table)

    def add_figure(self, path: str | Path, caption: str) -> None:
        path = Path(path)
        if self.base_dir is not None:
            path = Path(os.path.relpath(path, self.base_dir))
        self._blocks.append(f"![{caption}]({path.as_posix()})")

    def render(self) -> str:
        return "\n\n".join(self._blocks) + "\n"

    def write(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(), encoding="utf-8")
        logger.info(f"Report saved: {path}")
        return path


def _count_table(df: pd.DataFrame, column: str, names: Optional[Dict] = None) -> pd.DataFrame:
    counts = df[column].value_counts().sort_index()
    table = counts.rename_axis(column).reset_index(name='articles')
    if names is not None:
        table[column] = table[column].map(names)
    return table


def generate_report(
    fake_path: str | Path = FAKE_PATH,
    true_path: str | Path = TRUE_PATH,
    output_dir: str | Path = OUTPUT_DIR,
    models: Optional[Dict] = None,
    tfidf_params: Optional[Dict] = None,
    lgbm_params: Optional[Dict] = None,
    test_size: float = TEST_SIZE,
    random_state: int = RANDOM_STATE,
    threshold: float = THRESHOLD,
    top_n: int = TOP_N,
    progress: bool = True
) -> Path:
    """
    Run the whole analysis and write `report.md` with its figures into output_dir.

    Stages: load -> clean -> categorize -> split -> one train/evaluate run per
    entry of `models` (baseline unigrams and improved bigrams by default) -> comparison.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    models = MODELS if models is None else models
    tfidf_params = TFIDF_PARAMS if tfidf_params is None else tfidf_params

    report = Report("Fake vs Real News Classification", base_dir=output_dir)

    logger.info("Loading data...")
    raw_df = load_data(fake_path, true_path)

    logger.info("Preprocessing...")
    df = preprocess_data(raw_df, progress=progress)
    df = add_domain(df)

    report.add_heading("Data")
    report.add_text(
        f"{len(raw_df):,} articles loaded, {len(df):,} kept after removing rows with "
        f"missing text or dates and duplicated texts ({len(raw_df) - len(df):,} removed)."
    )
    report.add_table(_count_table(df, 'label', LABEL_NAMES), caption="Articles per label")
    report.add_table(_count_table(df, 'domain'), caption="Articles per domain")

    label_plot = output_dir / "label_distribution.png"
    plot_label_distribution(df, label_plot)
    report.add_figure(label_plot, "Articles per domain and label")

    logger.info("Splitting data...")
    train_df, test_df = split_data(df, test_size=test_size, random_state=random_state)
    report.add_text(f"Train: {len(train_df):,} articles, test: {len(test_df):,} articles.")

    domains = sorted((set(SUBJECT_TO_DOMAIN.values()) | set(df['domain'])) - {DEFAULT_DOMAIN})
    if (df['domain'] == DEFAULT_DOMAIN).any():
        domains.append(DEFAULT_DOMAIN)

    results = {}
    for key, model_cfg in models.items():
        title = model_cfg.get('title', key)
        res = train_and_evaluate(
            train_df, test_df,
            model_name=title,
            ngram_range=tuple(model_cfg['ngram_range']),
            tfidf_params=tfidf_params,
            lgbm_params=lgbm_params,
            threshold=threshold,
            top_n=top_n,
            multi_word_only=model_cfg.get('multi_word_only', False),
            domains=domains,
            output_dir=output_dir,
            file_prefix=key,
        )
        results[key] = res

        report.add_heading(title)
        report.add_text(f"Vocabulary: {res['vectorizer'].vocabulary_size:,} terms.")
        cm = pd.DataFrame(
            res['metrics']['confusion_matrix'],
            index=[f"True {LABEL_NAMES[i]}" for i in (0, 1)],
            columns=[f"Pred {LABEL_NAMES[i]}" for i in (0, 1)],
        )
        report.add_table(cm, caption="Confusion matrix", index=True)
        overall = pd.DataFrame([{
            k: res['metrics'][k] for k in ('accuracy', 'precision', 'recall', 'f1', 'roc_auc')
        }])
        report.add_table(overall, caption="Overall metrics")
        report.add_table(res['domain_metrics'], caption="Metrics per domain")
        report.add_figure(res['plots']['confusion_matrix'], f"{title} confusion matrix")
        report.add_table(res['importance'], caption=f"Top {top_n} features by gain")
        report.add_figure(res['plots']['importance'], f"{title} feature importance")

    report.add_heading("Comparison")
    report.add_table(compare_models(results))

    return report.write(output_dir / "report.md")
