#!/usr/bin/env python3
"""
Summarize a saved submap collection (.npz) as JSON.
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from class_belief_map.config import CodecConfig
from class_belief_map.map.collection_io import load_submap_collection
from class_belief_map.map.submap_collection import SubmapCollection


def summarize_collection(collection: SubmapCollection) -> dict:
    submaps = []
    for submap in collection:
        layer = submap.layer
        submaps.append({
            "id": submap.id,
            "voxel_type": submap.voxel_type,
            "voxel_size": submap.voxel_size,
            "voxels_per_side": submap.voxels_per_side,
            "n_blocks": layer.num_allocated_blocks,
            "n_initialized_voxels": layer.num_initialized_voxels(),
            "class_histogram": {str(k): v for k, v in sorted(layer.class_histogram().items())},
        })
    return {
        "n_submaps": len(collection),
        "submap_ids": collection.submap_ids,
        "submaps": submaps,
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Summarize a saved class belief submap collection")
    ap.add_argument("archive", help="Collection archive (.npz)")
    ap.add_argument("--top-n", type=int, default=CodecConfig().top_n, help="Top-K used when writing")
    ap.add_argument("--counter-bits", type=int, default=CodecConfig().counter_bits, help="Count width used when writing")
    ap.add_argument("--out", required=False, help="Output JSON report path")
    ap.add_argument("--verbose", action="store_true", help="Enable info logging")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    codec = CodecConfig(top_n=args.top_n, counter_bits=args.counter_bits)
    collection = load_submap_collection(Path(args.archive), codec)
    report = summarize_collection(collection)

    if args.out:
        Path(args.out).write_text(json.dumps(report, indent=2, sort_keys=True), encoding="utf-8")

    print(json.dumps(report, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
