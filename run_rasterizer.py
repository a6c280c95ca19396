import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from rasterizer.config import load_config
from rasterizer.core import SVGRasterizer
from rasterizer.errors import RasterizerError
from rasterizer.logger import get_logger


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Batch optimize and rasterize svg/png/jpg/gif assets into a dist folder."
    )
    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the rasterizer configuration JSON file.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging; keeps the scratch directory for inspection.",
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Wipe the output directory before writing (same as cleanOutputDir).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    # Tool binary overrides (SVG_RASTERIZER_SVGO, ...) may live in a local .env file.
    load_dotenv()

    args = parse_args(argv)
    log = get_logger("cli", debug=args.debug)

    try:
        config = load_config(args.config)
        overrides = {}
        if args.debug:
            overrides["debug"] = True
        if args.clean:
            overrides["clean_output_dir"] = True
        if overrides:
            config = dataclasses.replace(config, **overrides)

        result = SVGRasterizer(config).run()
    except (RasterizerError, OSError) as exc:
        log.error(f"svg-rasterizer failed: {exc}")
        return 1

    print(f"✅ svg-rasterizer completed: {len(result.files)} file(s) in {result.elapsed:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
