import logging
import warnings

from fakenews.config import FAKE_PATH, OUTPUT_DIR, TRUE_PATH
from fakenews.report import generate_report

warnings.filterwarnings('ignore')


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s')

    print("Fake News Classification Report")
    print("=" * 70)

    report_path = generate_report(FAKE_PATH, TRUE_PATH, OUTPUT_DIR)

    print(f"\nReport written to {report_path}")
