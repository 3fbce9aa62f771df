"""Main entry point for keycase."""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .case import build_case
from .config import load
from .config.types import NEGATIVE_SUFFIX
from .errors import KeycaseError
from .generators import TrimeshBuilder


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Keycase - Parametric Keyboard Case Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "configs",
        nargs="+",
        metavar="CONFIG",
        help="YAML configuration files; later files override earlier ones",
    )
    parser.add_argument(
        "-o", "--output",
        metavar="DIR",
        help="Write one STL file per feature, and one per set of cavities, to this directory",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort on the first feature that cannot be placed",
    )
    parser.add_argument(
        "--post-size",
        type=float,
        default=1.0,
        help="Edge length of the posts hulled at each tweak point (default: 1.0)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log more detail (repeat for debug output)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Build a keyboard case and report what was built."""
    args = parse_args(argv)
    logging.basicConfig(
        level=[logging.WARNING, logging.INFO, logging.DEBUG][min(args.verbose, 2)],
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load(*args.configs)
    except OSError as exc:
        print(f"Cannot read configuration: {exc}", file=sys.stderr)
        return 2
    except (KeycaseError, yaml.YAMLError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    builder = TrimeshBuilder(post_size=args.post_size)
    try:
        model = build_case(config, builder, isolate=not args.strict)
    except KeycaseError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        return 1

    print("Keycase - Parametric Keyboard Case Generator")
    print("=" * 40)
    print(f"Case contains {len(model.solids)} features:")
    for name, solid in model.solids.items():
        line = f"  - {name} ({len(solid.faces)} faces"
        if name in model.negatives:
            line += f", {len(model.negatives[name].faces)} cut"
        print(line + ")")
    if model.failures:
        print(f"\nSkipped {len(model.failures)} features:")
        for failure in model.failures:
            print(f"  - {failure}")

    if args.output:
        output_dir = Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)
        exports = list(model.solids.items()) + [
            (name + NEGATIVE_SUFFIX, solid) for name, solid in model.negatives.items()
        ]
        for name, solid in exports:
            path = output_dir / f"{name}.stl"
            solid.export(str(path))
            print(f"Saved {path}")

    return 1 if model.failures else 0


if __name__ == "__main__":
    sys.exit(main())
