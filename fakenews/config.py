from pathlib import Path

import yaml as yml


# --- PATHS ---
PACKAGE_DIR = Path(__file__).parent.resolve()
ROOT_DIR = PACKAGE_DIR.parent
CONFIG_PATH = ROOT_DIR / "config" / "config.yaml"

with open(CONFIG_PATH, 'r') as f:
    config = yml.safe_load(f)


RANDOM_STATE = config['RANDOM_STATE']

LABEL_NAMES = config['LABEL_NAMES']

FAKE_PATH = ROOT_DIR / config['DATA']['fake_path']
TRUE_PATH = ROOT_DIR / config['DATA']['true_path']
OUTPUT_DIR = ROOT_DIR / config['OUTPUT_DIR']

TEST_SIZE = config['TEST_SIZE']
THRESHOLD = config['THRESHOLD']
TOP_N = config['TOP_N']

SUBJECT_TO_DOMAIN = config['SUBJECT_TO_DOMAIN']
DEFAULT_DOMAIN = config['DEFAULT_DOMAIN']

CONTRACTIONS = config['CONTRACTIONS']

TFIDF_PARAMS = config['TFIDF_PARAMS']

MODELS = config['MODELS']

LGBM_PARAMS = config['LGBM_PARAMS']
