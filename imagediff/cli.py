"""
Command-Line Interface (CLI) Module
------------------------------------
Handles command-line argument parsing and runs the comparison of candidate
HDR images against a reference, printing the RMSE report to stdout.
"""

import argparse
import dataclasses
import sys
from typing import List, Optional, Sequence, Tuple

from imagediff.compare import compare_images, write_report
from imagediff.config import get_config
from imagediff.errors import ImageDiffError, UsageError
from imagediff.logger import setup_logger, set_console_level

# Setup logger for the CLI module
logger = setup_logger("cli")

class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with status 2."""

    def error(self, message: str):
        raise UsageError(message)

def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="imagediff",
        description="Compute luminance RMSE of HDR images (.hdr/.exr) against a reference image.",
        formatter_class=argparse.RawDescriptionHelpFormatter, # Keep formatting
        epilog='''Examples:
  Two candidates against a reference:
    imagediff image1.exr image2.exr refImage.exr
  Also write diff1.exr / diff2.exr:
    imagediff image1.exr image2.exr refImage.exr --diff
  Any number of candidates:
    imagediff --reference refImage.exr a.exr b.exr c.hdr
'''
    )
    parser.add_argument("images", nargs="*", metavar="IMAGE",
                        help="candidate1 candidate2 reference [diff]; with --reference, candidates only.")
    parser.add_argument("--reference", type=str, default=None,
                        help="Reference image. All positional images are then candidates.")
    parser.add_argument("--diff", action="store_true",
                        help="Report the worst pixel and write one difference image per candidate.")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Directory for difference images (default: config OUTPUT_DIR).")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a custom JSON configuration file.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log progress details to stderr.")
    return parser

def _resolve_images(args: argparse.Namespace) -> Tuple[List[str], str, bool]:
    """Split positional arguments into (candidates, reference, with_diff)."""
    images = list(args.images)

    if args.reference is not None:
        if not images:
            raise UsageError("at least one candidate image is required")
        return images, args.reference, args.diff

    if len(images) < 3:
        raise UsageError("expected image1 image2 refImage")
    if len(images) > 4:
        raise UsageError(f"too many positional arguments ({len(images)}); use --reference to compare more candidates")

    # A fourth positional argument of any value requests difference images
    with_diff = args.diff or len(images) == 4
    return images[:2], images[2], with_diff

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the CLI application. Returns the process exit code."""
    parser = _build_parser()
    try:
        args = parser.parse_intermixed_args(argv)
        candidates, reference, with_diff = _resolve_images(args)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"RMSE Sample Usage: {parser.prog} image1.exr image2.exr refImage.exr [diff]", file=sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return e.exit_code

    config = get_config(args.config)
    set_console_level("DEBUG" if args.verbose else config.LOG_LEVEL)
    if args.output_dir is not None:
        config = dataclasses.replace(config, OUTPUT_DIR=args.output_dir)

    logger.info(f"Comparing {len(candidates)} candidate(s) against {reference} (diff={with_diff})")
    try:
        results = compare_images(candidates, reference, with_diff=with_diff, config=config)
    except ImageDiffError as e:
        print(f"{parser.prog}: {type(e).__name__}: {e}", file=sys.stderr)
        return e.exit_code

    write_report(results, sys.stdout, precision=config.REPORT_PRECISION)
    return 0

if __name__ == "__main__":
    sys.exit(main())
