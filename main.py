#!/usr/bin/env python3
"""
PACK Archive Tool - Entry Point

Lists, extracts and creates PACK archives from the command line.
"""

import argparse
import json
import sys
from pathlib import Path

from core.config import Config
from core.errors import CommitOverflow, PackError
from core.pack_format import U32_MAX
from core.pack_operations import collect_files, create_archive, extract_archive, list_archive
from utils.file_utils import filetime_to_iso, format_filetime, format_size
from utils.i18n import translator as t


def run_list_cli(args, config: Config) -> int:
    """Handles the 'list' command."""
    utc_offset = config.get('timezone_offset')
    try:
        summary, entries = list_archive(args.packfile, args.patterns, verbose=args.verbose)
    except PackError as e:
        print(t.get('open_failed', e), file=sys.stderr)
        return 1

    total_size = sum(entry.info.size_orig for entry in entries)
    if args.output == 'json':
        print(json.dumps({
            "version": summary.version,
            "created_iso": filetime_to_iso(summary.created, utc_offset),
            "mountpoint": summary.mountpoint,
            "file_count": summary.file_count,
            "files": [
                {
                    "name": entry.name,
                    "size_bytes": entry.info.size_orig,
                    "compressed_bytes": entry.info.size_compressed,
                    "modified_iso": filetime_to_iso(entry.info.time_modified, utc_offset),
                }
                for entry in entries
            ],
        }, indent=2))
        return 0

    print(t.get('version_number', summary.version))
    print(t.get('creation_date', format_filetime(summary.created, utc_offset)))
    print(t.get('mountpoint', summary.mountpoint))
    print("====================")
    for entry in entries:
        print(f"{format_size(entry.info.size_orig):>10s}\t{entry.name}")
    print(t.get('list_total', len(entries), format_size(total_size)))
    return 0


def run_extract_cli(args, config: Config) -> int:
    """Handles the 'extract' command."""
    dest_dir = Path(args.directory or config.get('extract_dir'))
    try:
        report = extract_archive(
            args.packfile, dest_dir, args.patterns,
            progress=args.progress and config.get('show_progress'),
            verbose=args.verbose,
        )
    except PackError as e:
        print(t.get('open_failed', e), file=sys.stderr)
        return 1
    except OSError as e:
        print(f"{t.get('error')}: {e}", file=sys.stderr)
        return 1

    for name in report.extracted:
        print(name)
    print(t.get('extract_summary', len(report.extracted), len(report.failed)), file=sys.stderr)
    return 1 if report.failed else 0


def run_create_cli(args, config: Config) -> int:
    """Handles the 'create' command."""
    version = args.version if args.version is not None else config.get('default_version')
    mountpoint = args.mountpoint if args.mountpoint is not None else config.get('default_mountpoint')
    if not 0 <= version <= U32_MAX:
        print(t.get('invalid_version', version), file=sys.stderr)
        return 1

    try:
        files = collect_files(args.inputs)
    except (OSError, ValueError) as e:
        print(t.get('collect_failed', e), file=sys.stderr)
        return 1

    print(t.get('creating_package', args.packfile))
    print(t.get('pack_version', version))
    print(t.get('mountpoint', mountpoint))
    print(t.get('file_count', len(files)))

    try:
        header = create_archive(
            args.packfile, args.inputs,
            version=version,
            mountpoint=mountpoint,
            utc_offset=config.get('timezone_offset'),
            compression_level=config.get('compression_level'),
            progress=args.progress and config.get('show_progress'),
            verbose=args.verbose,
            files=files,
        )
    except CommitOverflow as e:
        print(t.get('commit_failed', e), file=sys.stderr)
        return 1
    except (PackError, ValueError) as e:
        print(t.get('add_failed', e), file=sys.stderr)
        return 1

    print(t.get('create_complete', args.packfile, format_size(header.data_section_size)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='packtool',
        description="PACK archive tool.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  packtool list data.pack "*.xml"
    (Lists the XML files in the archive)

  packtool extract data.pack "db/*" -d ./out
    (Extracts everything below db/ into ./out)

  packtool create new.pack data -v 120 -m "data\\\\"
    (Packs the data directory into new.pack)
"""
    )
    parser.add_argument('--lang', choices=['en', 'de'], help='Set language for CLI output')
    parser.add_argument('--config', type=Path, help='Path to the JSON configuration file')
    parser.add_argument('--verbose', action='store_true', help='Print diagnostic messages to stderr')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # --- List Command ---
    list_parser = subparsers.add_parser('list', help='List files in the package')
    list_parser.add_argument('packfile', type=Path, help='The package file')
    list_parser.add_argument('patterns', nargs='*', help='Wildcard patterns (e.g. "*.txt")')
    list_parser.add_argument('--output', choices=['text', 'json'], default='text', help='Output format')

    # --- Extract Command ---
    extract_parser = subparsers.add_parser('extract', help='Extract files from the package')
    extract_parser.add_argument('packfile', type=Path, help='The package file')
    extract_parser.add_argument('patterns', nargs='*', help='Wildcard patterns (e.g. "*.txt")')
    extract_parser.add_argument('-d', '--directory', type=Path, help='Output directory')
    extract_parser.add_argument('--no-progress', dest='progress', action='store_false',
                                help='Do not show a progress bar')

    # --- Create Command ---
    create_parser = subparsers.add_parser('create', help='Create a new package')
    create_parser.add_argument('packfile', type=Path, help='The package file to write')
    create_parser.add_argument('inputs', nargs='+', help='Files and directories to add')
    create_parser.add_argument('-v', '--version', type=int, help='Package version number')
    create_parser.add_argument('-m', '--mountpoint', type=str, help='Package mountpoint')
    create_parser.add_argument('--no-progress', dest='progress', action='store_false',
                               help='Do not show a progress bar')

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = Config(args.config) if args.config else Config()
    lang = args.lang or config.get('language')
    if lang:
        t.set_language(lang)

    commands = {
        'list': run_list_cli,
        'extract': run_extract_cli,
        'create': run_create_cli,
    }
    if args.command not in commands:
        print(t.get('no_command'), file=sys.stderr)
        parser.print_help(sys.stderr)
        return 1
    return commands[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
