from pathlib import Path

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def demo_df() -> pd.DataFrame:
    return pd.read_csv(ROOT / "examples" / "datasets" / "demo_concentration.csv")
