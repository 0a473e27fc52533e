#!/usr/bin/env python3
"""
Build the recommendation snapshot from the content store and interaction log.
"""

import argparse
import logging
import sys

from artrec.config.pipeline_config import PipelineConfig
from artrec.data.errors import PipelineError
from artrec.features.pipeline import run_pipeline


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Build the recommendation snapshot")
    parser.add_argument('--data_dir', type=str, help='Directory with parquet inputs')
    parser.add_argument('--output_dir', type=str, help='Directory for analysis_data.json')
    parser.add_argument('--approval_window', type=int, help='Most recent approvals to read')
    parser.add_argument('--behavior_window', type=int, help='Most recent behavior events to read')
    parser.add_argument('--read_timeout', type=float, help='Deadline for the read stage, seconds')
    parser.add_argument('--log_level', type=str, help='Logging level (default INFO)')
    return parser.parse_args(argv)


def build_config(args) -> PipelineConfig:
    """Defaults < ARTREC_* environment < command line."""
    config = PipelineConfig.from_env()
    overrides = {
        'DATA_DIR': args.data_dir,
        'OUTPUT_DIR': args.output_dir,
        'APPROVAL_WINDOW': args.approval_window,
        'BEHAVIOR_WINDOW': args.behavior_window,
        'READ_TIMEOUT_SECONDS': args.read_timeout,
        'LOG_LEVEL': args.log_level,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    config.__post_init__()
    return config


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        config = build_config(args)
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print(f"Building snapshot from {config.DATA_DIR} ...")
    try:
        result = run_pipeline(config)
    except PipelineError as e:
        print(f"❌ Snapshot build failed at stage '{e.stage}': {e.cause}", file=sys.stderr)
        for name, count in e.counts.items():
            print(f"  {name}: {count}", file=sys.stderr)
        print("  Previous snapshot (if any) was left unchanged.", file=sys.stderr)
        return 1

    metadata = result.snapshot.metadata
    print(f"Snapshot built:")
    print(f"  Artworks: {metadata.artwork_count}")
    print(f"  Users with likes: {metadata.user_count}")
    print(f"  Likes: {metadata.like_count}")
    print(f"  Behavior events: {metadata.behavior_log_count}")
    print(f"  Algorithm: {metadata.algorithm}")
    print(f"✅ Snapshot saved to {result.path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
