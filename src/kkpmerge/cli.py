"""
CLI entry point for kkpmerge.

Usage:
    kkpmerge <packer kkp> [<debug kkp> ...]      Merge into merged.kkp
    kkpmerge -o out.kkp packer.kkp debug.kkp      Merge into out.kkp

The first file is the primary (shipped binary); the rest are references
whose source/line attribution is overlaid onto same-named symbols.
"""

import argparse
import logging
import sys
from pathlib import Path

from kkpmerge import __version__
from kkpmerge.config import ConfigError, MergeConfig
from kkpmerge.kkp.errors import KKPError
from kkpmerge.pipeline import merge_files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kkpmerge",
        description="Merge KKP debug attribution from reference builds into a packer KKP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    kkpmerge intro.kkp intro_debug.kkp
    kkpmerge -o intro_merged.kkp intro.kkp part1_debug.kkp part2_debug.kkp
    kkpmerge --match prefix --report merge.json intro.kkp intro_debug.kkp
"""
    )
    parser.add_argument('--version', action='version', version=f'kkpmerge {__version__}')
    parser.add_argument('primary', help='Packer KKP (authoritative byte layout)')
    parser.add_argument('references', nargs='*', help='Debug KKPs to take attribution from')
    parser.add_argument('-o', '--output', help='Output to <file> (default: merged.kkp)')
    parser.add_argument('-c', '--config', help='YAML config file')
    parser.add_argument('--match', choices=['strict', 'prefix'], help='Symbol name matching')
    parser.add_argument('--report', help='Write a JSON merge report to <file>')

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Debug output')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Errors only')
    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = MergeConfig(Path(args.config) if args.config else None)
        config.update(
            output_path=args.output,
            symbol_matching=args.match,
            report_path=args.report,
        )
        level = config.log_level
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        merge_files([args.primary, *args.references], config=config)
    except KKPError as e:
        print(e, file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"file error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
