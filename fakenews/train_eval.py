import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

# Sklearn
from sklearn.metrics import (
    confusion_matrix, f1_score,
    precision_score, recall_score, roc_auc_score
)

# LightGBM
import lightgbm as lgb

from fakenews.config import (
    LABEL_NAMES, LGBM_PARAMS, RANDOM_STATE, THRESHOLD, TOP_N, TFIDF_PARAMS
)
from fakenews.processing import NewsVectorizer


logger = logging.getLogger(__name__)

INSUFFICIENT_DATA = 'insufficient data'
SINGLE_CLASS = 'single class'


# =============================================================================
# MODEL TRAINING
# =============================================================================

def train_classifier(
    X_train,
    y_train: np.ndarray,
    params: Optional[Dict] = None,
    random_state: int = RANDOM_STATE,
    **kwargs
) -> lgb.LGBMClassifier:
    """
    Train the gradient-boosted tree ensemble.

    Parameters
    ----------
    X_train : sparse matrix
        TF-IDF training matrix.
    y_train : np.ndarray
        Binary labels (0 = fake, 1 = real).
    params : dict | None
        LGBMClassifier parameters, LGBM_PARAMS from the config by default.
    **kwargs
        Overrides merged on top of params (e.g. min_child_samples for tiny data).
    """
    if X_train.shape[0] == 0:
        raise ValueError("Cannot train on an empty training set")

    params = dict(LGBM_PARAMS if params is None else params)
    params.update(kwargs)
    params.setdefault('random_state', random_state)

    model = lgb.LGBMClassifier(**params)
    model.fit(X_train, np.asarray(y_train))
    logger.info(f"  Trained {params.get('n_estimators', 100)} trees "
                f"(max_depth={params.get('max_depth')}, learning_rate={params.get('learning_rate')})")
    return model


def predict_proba(model: lgb.LGBMClassifier, X) -> np.ndarray:
    """Probability of the positive (real) class."""
    return model.predict_proba(X)[:, 1]


def predict(model: lgb.LGBMClassifier, X, threshold: float = THRESHOLD) -> np.ndarray:
    return (predict_proba(model, X) >= threshold).astype(int)


# =============================================================================
# EVALUATION
# =============================================================================

def compute_metrics(y_true, y_pred, y_score=None) -> Dict[str, Any]:
    """Confusion matrix counts and derived rates, positive class = 1 (real)."""
    y_true = np.asarray(y_true).astype(int)
    y_pred = np.asarray(y_pred).astype(int)

    cm = confusion_matrix(y_true, y_pred, labels=[0, 1])
    tn, fp, fn, tp = (int(v) for v in cm.ravel())
    total = tn + fp + fn + tp

    metrics = {
        'confusion_matrix': cm,
        'tn': tn, 'fp': fp, 'fn': fn, 'tp': tp,
        'n': total,
        'accuracy': (tp + tn) / total,
        'precision': precision_score(y_true, y_pred, labels=[0, 1], pos_label=1, zero_division=0),
        'recall': recall_score(y_true, y_pred, labels=[0, 1], pos_label=1, zero_division=0),
        'f1': f1_score(y_true, y_pred, labels=[0, 1], pos_label=1, zero_division=0),
        'roc_auc': None,
    }
    if y_score is not None and len(np.unique(y_true)) == 2:
        metrics['roc_auc'] = roc_auc_score(y_true, y_score)

    return metrics


def evaluate_model(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    model_name: str = "Model",
    y_score: Optional[np.ndarray] = None
) -> Dict[str, Any]:
    """Overall evaluation of binary predictions, printed as a report block."""
    metrics = compute_metrics(y_true, y_pred, y_score)

    print(f"\n{'=' * 70}")
    print(f"EVALUATION - {model_name}")
    print('=' * 70)

    cm_df = pd.DataFrame(
        metrics['confusion_matrix'],
        index=[f"True {LABEL_NAMES[i]}" for i in (0, 1)],
        columns=[f"Pred {LABEL_NAMES[i]}" for i in (0, 1)],
    )
    print("\nConfusion Matrix:")
    print(cm_df.to_string())

    print(f"\n{'GLOBAL METRICS':^40}")
    print("-" * 40)
    print(f"{'Accuracy:':<25} {metrics['accuracy']:.4f}")
    print(f"{'Precision:':<25} {metrics['precision']:.4f}")
    print(f"{'Recall:':<25} {metrics['recall']:.4f}")
    print(f"{'F1:':<25} {metrics['f1']:.4f}")
    if metrics['roc_auc'] is not None:
        print(f"{'ROC-AUC:':<25} {metrics['roc_auc']:.4f}")

    return metrics


def evaluate_by_domain(
    test_df: pd.DataFrame,
    y_pred: np.ndarray,
    domains: Optional[list] = None,
    domain_col: str = 'domain',
    label_col: str = 'label'
) -> pd.DataFrame:
    """
    Recompute the metrics on every domain slice of the test set.

    A domain without rows is reported with status 'insufficient data' and no
    metrics; a slice holding one class only is computed and flagged 'single class'.
    """
    domains = sorted(test_df[domain_col].unique()) if domains is None else list(domains)
    y_pred = pd.Series(np.asarray(y_pred), index=test_df.index)

    rows = []
    for domain in domains:
        mask = test_df[domain_col] == domain
        n = int(mask.sum())
        if n == 0:
            logger.warning(f"Domain '{domain}' has no test rows, metrics skipped")
            rows.append({'domain': domain, 'n': 0, 'status': INSUFFICIENT_DATA})
            continue

        y_true_slice = test_df.loc[mask, label_col]
        m = compute_metrics(y_true_slice, y_pred[mask])
        status = 'ok'
        if y_true_slice.nunique() < 2:
            logger.warning(f"Domain '{domain}' holds a single class")
            status = SINGLE_CLASS

        rows.append({
            'domain': domain, 'n': n,
            'tn': m['tn'], 'fp': m['fp'], 'fn': m['fn'], 'tp': m['tp'],
            'accuracy': m['accuracy'], 'precision': m['precision'],
            'recall': m['recall'], 'f1': m['f1'],
            'status': status,
        })

    columns = ['domain', 'n', 'tn', 'fp', 'fn', 'tp', 'accuracy', 'precision', 'recall', 'f1', 'status']
    return pd.DataFrame(rows, columns=columns).astype({c: 'Int64' for c in ('tn', 'fp', 'fn', 'tp')})


def plot_confusion_matrix(
    cm: np.ndarray,
    model_name: str,
    save_path: Optional[str | Path] = None
) -> None:
    fig, axes = plt.subplots(1, 2, figsize=(10, 4))

    row_sums = cm.sum(axis=1)[:, np.newaxis]
    cm_norm = np.divide(cm.astype('float'), row_sums, out=np.zeros(cm.shape), where=row_sums > 0)
    labels = [LABEL_NAMES[i] for i in (0, 1)]

    sns.heatmap(cm_norm, annot=True, fmt='.2f', cmap='Blues',
                xticklabels=labels, yticklabels=labels, ax=axes[0])
    axes[0].set_title(f'{model_name} - Normalized')
    axes[0].set_xlabel('Predicted'); axes[0].set_ylabel('True')

    sns.heatmap(cm, annot=True, fmt='d', cmap='Blues',
                xticklabels=labels, yticklabels=labels, ax=axes[1])
    axes[1].set_title(f'{model_name} - Absolute')
    axes[1].set_xlabel('Predicted'); axes[1].set_ylabel('True')

    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"  Saved: {save_path}")
    plt.close(fig)


# =============================================================================
# FEATURE IMPORTANCE
# =============================================================================

def feature_importance(
    model: lgb.LGBMClassifier,
    feature_names: np.ndarray,
    top_n: int = TOP_N,
    multi_word_only: bool = False
) -> pd.DataFrame:
    """Top features by total gain, optionally restricted to multi-word terms."""
    gain = model.booster_.feature_importance(importance_type='gain')
    imp = pd.DataFrame({'feature': np.asarray(feature_names), 'gain': gain})
    imp = imp[imp['gain'] > 0]
    if multi_word_only:
        imp = imp[imp['feature'].str.contains(' ', regex=False)]
    return imp.sort_values('gain', ascending=False).head(top_n).reset_index(drop=True)


def plot_feature_importance(
    importance: pd.DataFrame,
    title: str,
    save_path: Optional[str | Path] = None
) -> None:
    fig, ax = plt.subplots(figsize=(8, max(3, 0.35 * len(importance) + 1)))

    # largest gain on top
    data = importance.iloc[::-1]
    ax.barh(range(len(data)), data['gain'], color='steelblue')
    ax.set_yticks(range(len(data)))
    ax.set_yticklabels([f[:30] for f in data['feature']], fontsize=8)
    ax.set_xlabel('Importance (Gain)')
    ax.set_title(title, fontweight='bold')

    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"  Saved: {save_path}")
    plt.close(fig)


def plot_label_distribution(df: pd.DataFrame, save_path: Optional[str | Path] = None) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    plot_df = df.assign(label_name=df['label'].map(LABEL_NAMES))
    sns.countplot(data=plot_df, x='domain', hue='label_name', ax=ax)
    ax.set_title('Articles per Domain and Label')
    ax.set_xlabel('Domain'); ax.set_ylabel('Articles')
    ax.legend(title='Label')

    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"  Saved: {save_path}")
    plt.close(fig)


# =============================================================================
# TRAINING AND EVALUATION
# =============================================================================

def train_and_evaluate(
    train_df: pd.DataFrame,
    test_df: pd.DataFrame,
    model_name: str = "Model",
    ngram_range: Tuple[int, int] = (1, 1),
    tfidf_params: Optional[Dict] = None,
    lgbm_params: Optional[Dict] = None,
    threshold: float = THRESHOLD,
    top_n: int = TOP_N,
    multi_word_only: bool = False,
    domains: Optional[list] = None,
    output_dir: Optional[str | Path] = None,
    file_prefix: str = 'model'
) -> Dict[str, Any]:
    """
    Fit the vectorizer on the training split, train the classifier and evaluate it.

    Parameters
    ----------
    train_df, test_df : pd.DataFrame
        Cleaned splits with 'text', 'label' and 'domain' columns.
    model_name : str
        Title used in printed blocks and plots.
    ngram_range : tuple
        N-gram range of the vectorizer.
    tfidf_params : dict | None
        NewsVectorizer parameters (min_df, max_df, token_pattern, extra_stop_words).
    lgbm_params : dict | None
        Overrides for the LightGBM parameters of the config.
    multi_word_only : bool
        Keep only multi-word terms in the importance chart.
    domains : list | None
        Domains reported per slice, those present in test_df when None.
    output_dir : str | Path | None
        Where plots are saved; nothing is saved when None.
    file_prefix : str
        Prefix of the saved plot files.

    Returns
    -------
    dict
        vectorizer, model, y_pred, y_score, metrics, train_metrics,
        domain_metrics, importance, plots.
    """
    tfidf_params = dict(TFIDF_PARAMS if tfidf_params is None else tfidf_params)

    print("=" * 70)
    print(f"TRAIN AND EVALUATE - {model_name}")
    print("=" * 70)

    logger.info("1. Fitting vectorizer on the training split...")
    vectorizer = NewsVectorizer(ngram_range=tuple(ngram_range), **tfidf_params)
    X_train = vectorizer.fit_transform(train_df['text'])
    X_test = vectorizer.transform(test_df['text'])
    y_train = train_df['label'].values
    y_test = test_df['label'].values

    logger.info("2. Training model...")
    params = dict(LGBM_PARAMS)
    params.update(lgbm_params or {})
    model = train_classifier(X_train, y_train, params=params)

    logger.info("3. Evaluating...")
    y_score = predict_proba(model, X_test)
    y_pred = (y_score >= threshold).astype(int)

    train_metrics = compute_metrics(y_train, predict(model, X_train, threshold))
    metrics = evaluate_model(y_test, y_pred, model_name=model_name, y_score=y_score)
    print(f"\n{'Train F1:':<25} {train_metrics['f1']:.4f}")
    print(f"{'Gap (overfitting):':<25} {train_metrics['f1'] - metrics['f1']:.4f}")

    domain_metrics = evaluate_by_domain(test_df, y_pred, domains=domains)
    print("\nMetrics per domain:")
    print(domain_metrics.to_string(index=False))

    importance = feature_importance(
        model, vectorizer.get_feature_names_out(), top_n=top_n, multi_word_only=multi_word_only
    )

    plots = {}
    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        plots['confusion_matrix'] = output_dir / f"{file_prefix}_confusion.png"
        plot_confusion_matrix(metrics['confusion_matrix'], model_name, plots['confusion_matrix'])
        plots['importance'] = output_dir / f"{file_prefix}_importance.png"
        plot_feature_importance(
            importance, f'{model_name} - Top {top_n} Features (Gain)', plots['importance']
        )

    return {
        'name': model_name,
        'vectorizer': vectorizer,
        'model': model,
        'y_pred': y_pred,
        'y_score': y_score,
        'metrics': metrics,
        'train_metrics': train_metrics,
        'domain_metrics': domain_metrics,
        'importance': importance,
        'plots': plots,
    }


def compare_models(results: Dict[str, Dict[str, Any]]) -> pd.DataFrame:
    """One row per trained model, in insertion order."""
    rows = []
    for name, res in results.items():
        m = res['metrics']
        rows.append({
            'model': res.get('name', name),
            'vocabulary': res['vectorizer'].vocabulary_size,
            'accuracy': m['accuracy'],
            'precision': m['precision'],
            'recall': m['recall'],
            'f1': m['f1'],
            'roc_auc': m['roc_auc'],
            'train_f1': res['train_metrics']['f1'],
        })

    comparison_df = pd.DataFrame(rows)

    print("\n" + "=" * 70)
    print("FINAL COMPARISON")
    print("=" * 70)
    print(comparison_df.to_string(index=False))

    return comparison_df
