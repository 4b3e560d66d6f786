from __future__ import annotations

import argparse
from pathlib import Path

from api import run_chase


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="CPU software-rendered car chase")
    parser.add_argument("--headless", action="store_true", help="write PNG frames instead of opening a window")
    parser.add_argument("--frames", type=int, default=None)
    parser.add_argument("--out", type=Path, default=None, help="output directory for PNG frames")
    parser.add_argument("--fps", type=int, default=None)
    parser.add_argument("--scale", type=float, default=None)
    parser.add_argument("--workers", type=int, default=None, help="0 runs actors inline")
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)
    run_chase(
        headless=args.headless,
        frames=args.frames,
        out_dir=args.out,
        fps=args.fps,
        scale=args.scale,
        workers=args.workers,
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
