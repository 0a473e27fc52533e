#!/usr/bin/env python3
"""
Generate synthetic artworks, approvals and behaviour logs as parquet.
"""

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from artrec.config.constants import ARTWORKS_FILE, APPROVALS_FILE, BEHAVIOR_LOGS_FILE
from artrec.synthetic.generator_config import get_default_config
from artrec.synthetic.generate_artworks import generate_all_artworks
from artrec.synthetic.generate_interactions import generate_all_interactions


def save_to_parquet(data_list, output_path: Path, columns=None):
    """Save list of dataclass objects to Parquet."""
    data_dicts = []
    for item in data_list:
        d = {}
        for key, value in vars(item).items():
            if isinstance(value, dict):
                d[key] = json.dumps(value, ensure_ascii=False)
            else:
                d[key] = value
        data_dicts.append(d)

    df = pd.DataFrame(data_dicts, columns=columns)
    df.to_parquet(output_path, index=False)
    print(f"  Saved {len(df)} rows to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Generate synthetic marketplace data")
    parser.add_argument("--output_dir", type=str, default="data", help="Output directory for generated data")
    parser.add_argument("--n_artworks", type=int, default=500, help="Number of artworks to generate")
    parser.add_argument("--n_users", type=int, default=200, help="Number of users to generate")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 80)
    print("SYNTHETIC DATA GENERATION")
    print("=" * 80)

    config = get_default_config()
    config.N_ARTWORKS = args.n_artworks
    config.N_USERS = args.n_users
    config.RANDOM_SEED = args.seed
    end_date = datetime.now(timezone.utc)

    print(f"\nConfiguration:")
    print(f"  Artworks: {config.N_ARTWORKS}")
    print(f"  Users: {config.N_USERS}")
    print(f"  Creators: {config.N_CREATORS}")
    print(f"  Random seed: {config.RANDOM_SEED}")
    print()

    print("Step 1/2: Generating artworks...")
    artworks = generate_all_artworks(config, end_date)

    print("Step 2/2: Generating approvals and behavior logs...")
    approvals, behaviors = generate_all_interactions(artworks, config, end_date)

    save_to_parquet(artworks, output_dir / ARTWORKS_FILE)
    save_to_parquet(approvals, output_dir / APPROVALS_FILE)
    save_to_parquet(
        behaviors, output_dir / BEHAVIOR_LOGS_FILE,
        columns=["user_id", "action", "timestamp", "artwork_id", "context"]
    )

    print("=" * 80)
    print("GENERATION COMPLETE")
    print("=" * 80)
    print(f"\nGenerated data:")
    print(f"  Artworks: {len(artworks)}")
    print(f"  Approvals: {len(approvals)}")
    print(f"  Behavior events: {len(behaviors)}")
    print(f"\nFiles saved to: {output_dir.absolute()}")
    print("\nNext step:")
    print(f"  python -m artrec.scripts.run_build_snapshot --data_dir {output_dir} --output_dir {output_dir}/snapshot")
    print()


if __name__ == "__main__":
    main()
