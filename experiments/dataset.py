"""
Labeled dataset builder for lead scoring experiments.

Generates synthetic leads with known conversion outcomes, extracts their
feature frames, and writes stratified train/validation/test splits:

    data/train.csv       60%
    data/validation.csv  20% (threshold selection)
    data/test.csv        20% (reported metrics)

LIMITATION: outcomes are simulated from a latent intent variable, so
metrics measure how well the weights recover that signal, not real-world
conversion performance. Replace with a CRM export when one is available.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd
from sklearn.model_selection import train_test_split

from lead_scoring.extraction import LeadFeatureExtractor
from lead_scoring.scorer import SAMPLE_AS_OF, generate_sample_leads

log = logging.getLogger(__name__)

OUTPUT_DIR = Path(__file__).parent / "data"
RANDOM_STATE = 42
LABEL_COLUMN = "IS_CONVERTED"


def build_feature_frame(
    n_leads: int = 600,
    seed: int = RANDOM_STATE,
    as_of: datetime = SAMPLE_AS_OF,
) -> pd.DataFrame:
    """
    Generate leads and extract one labeled feature row per lead.

    Returns:
        DataFrame with LEAD_ID, feature columns and IS_CONVERTED
    """
    records = generate_sample_leads(n_leads, seed=seed, as_of=as_of)
    df = LeadFeatureExtractor().extract_frame(records, as_of=as_of)
    log.info(
        "Built %d leads (conversion rate %.1f%%)",
        len(df),
        100 * df[LABEL_COLUMN].mean(),
    )
    return df


def split_dataset(
    df: pd.DataFrame,
    val_size: float = 0.2,
    test_size: float = 0.2,
    seed: int = RANDOM_STATE,
) -> tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """
    Stratified train/validation/test split on the conversion label.

    Returns:
        Tuple of (train, validation, test)
    """
    train_val, test = train_test_split(
        df, test_size=test_size, stratify=df[LABEL_COLUMN], random_state=seed
    )
    train, val = train_test_split(
        train_val,
        test_size=val_size / (1 - test_size),
        stratify=train_val[LABEL_COLUMN],
        random_state=seed,
    )
    return train, val, test


def create_dataset(
    output_dir: Optional[Path] = None,
    n_leads: int = 600,
    seed: int = RANDOM_STATE,
) -> dict[str, Path]:
    """
    Build the labeled dataset and write the split CSVs.

    Args:
        output_dir: Directory for the CSVs (default: experiments/data)
        n_leads: Number of synthetic leads
        seed: Random seed for generation and splitting

    Returns:
        Mapping of split name to written path
    """
    output_dir = Path(output_dir or OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)

    df = build_feature_frame(n_leads, seed=seed)
    train, val, test = split_dataset(df, seed=seed)

    paths = {}
    for split, frame in [("train", train), ("validation", val), ("test", test)]:
        path = output_dir / f"{split}.csv"
        frame.to_csv(path, index=False)
        paths[split] = path
        log.info(
            "Wrote %s: %d leads, %d converted", path, len(frame), frame[LABEL_COLUMN].sum()
        )
    return paths
