#!/usr/bin/env python3
"""
Verification script to check that the inputs and the written snapshot exist and are well-formed.
"""

import argparse
import os
import sys
from pathlib import Path

import pandas as pd

from artrec.config.constants import (
    ARTWORKS_FILE, APPROVALS_FILE, BEHAVIOR_LOGS_FILE, SNAPSHOT_FILENAME,
    N_REFERENCE_TAGS, ALGORITHM_TAG, TOP_K_CATEGORIES, TOP_K_STYLES, TOP_K_TAGS, TOP_K_CREATORS
)
from artrec.data.errors import DataReadError
from artrec.data.repositories import ARTWORK_COLUMNS, APPROVAL_COLUMNS, BEHAVIOR_COLUMNS
from artrec.features.snapshot_builder import load_snapshot


def check_file_exists(filepath, description: str) -> bool:
    """Check if a file exists."""
    exists = os.path.exists(filepath)
    if exists:
        print(f"✅ {description}: {filepath}")
    else:
        print(f"❌ MISSING: {description}: {filepath}")
    return exists


def verify_parquet_schema(filepath, expected_columns: list, description: str) -> bool:
    """Verify parquet file has correct schema."""
    try:
        df = pd.read_parquet(filepath)
    except Exception as e:
        print(f"❌ {description}: Error reading file - {e}")
        return False

    missing_cols = set(expected_columns) - set(df.columns)
    if missing_cols:
        print(f"❌ {description}: Missing columns {sorted(missing_cols)}")
        return False

    print(f"✅ {description}: Schema correct ({len(df)} rows)")
    return True


def verify_snapshot(filepath) -> bool:
    """Verify snapshot parses and its structures agree with its metadata."""
    try:
        snapshot = load_snapshot(filepath)
    except DataReadError as e:
        print(f"❌ Snapshot: {e}")
        return False

    problems = []
    metadata = snapshot.metadata
    if metadata.algorithm != ALGORITHM_TAG:
        problems.append(f"algorithm is {metadata.algorithm}, expected {ALGORITHM_TAG}")
    if metadata.artwork_count != len(snapshot.artworks):
        problems.append("artworkCount does not match artworks")
    if metadata.user_count != len(snapshot.user_profiles):
        problems.append("userCount does not match userProfiles")

    for artwork in snapshot.artworks:
        features = artwork.features
        if len(features.tag_vector) != N_REFERENCE_TAGS:
            problems.append(f"{artwork.id}: tag_vector length {len(features.tag_vector)}")
        for name in ("category_score", "style_score", "recency_score"):
            value = getattr(features, name)
            if not 0.0 <= value <= 1.0:
                problems.append(f"{artwork.id}: {name}={value} outside [0, 1]")

    for artwork_id, row in snapshot.item_similarity_matrix.items():
        if artwork_id in row:
            problems.append(f"{artwork_id}: self-similarity present")

    stats = snapshot.global_stats
    limits = [
        ("popularCategories", stats.popular_categories, TOP_K_CATEGORIES),
        ("popularStyles", stats.popular_styles, TOP_K_STYLES),
        ("popularTags", stats.popular_tags, TOP_K_TAGS),
        ("topArtists", stats.top_creators, TOP_K_CREATORS),
    ]
    for name, entries, limit in limits:
        if len(entries) > limit:
            problems.append(f"{name} has {len(entries)} entries, limit {limit}")

    if problems:
        for problem in problems[:20]:
            print(f"❌ Snapshot: {problem}")
        return False

    print(f"✅ Snapshot: {metadata.artwork_count} artworks, {metadata.user_count} users, "
          f"generated {metadata.generated_at}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Verify snapshot build deliverables")
    parser.add_argument('--data_dir', type=str, default='data')
    parser.add_argument('--snapshot_dir', type=str, default='data/snapshot')
    args = parser.parse_args()

    print("=" * 80)
    print("VERIFYING SNAPSHOT PIPELINE DELIVERABLES")
    print("=" * 80)
    print()

    data_dir = Path(args.data_dir)
    snapshot_file = Path(args.snapshot_dir) / SNAPSHOT_FILENAME

    if not data_dir.exists():
        print("❌ Data directory does not exist. Run synthetic data generation first.")
        return False

    all_ok = True

    print("Checking input files...")
    inputs = [
        (ARTWORKS_FILE, ARTWORK_COLUMNS, "Artworks"),
        (APPROVALS_FILE, APPROVAL_COLUMNS, "Approvals"),
        (BEHAVIOR_LOGS_FILE, BEHAVIOR_COLUMNS, "Behavior logs"),
    ]
    for filename, columns, description in inputs:
        if check_file_exists(data_dir / filename, description):
            all_ok &= verify_parquet_schema(data_dir / filename, columns, f"{description} schema")
        else:
            all_ok = False
    print()

    print("Checking snapshot...")
    if check_file_exists(snapshot_file, "Snapshot"):
        all_ok &= verify_snapshot(snapshot_file)
    else:
        all_ok = False
    print()

    print("=" * 80)
    if all_ok:
        print("✅ ALL DELIVERABLES VERIFIED")
        return True

    print("❌ SOME DELIVERABLES MISSING OR INCORRECT")
    print()
    print("Run the pipeline:")
    print("  1. python -m artrec.scripts.run_synthetic_generation --output_dir data")
    print("  2. python -m artrec.scripts.run_build_snapshot --data_dir data --output_dir data/snapshot")
    return False


if __name__ == '__main__':
    success = main()
    sys.exit(0 if success else 1)
