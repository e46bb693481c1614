"""Main CLI entry point for the lossless-xml command-line tool.

Provides round-trip formatting with attribute edits for plain XML files and
for XML documents stored inside zip archives, plus tokenizer dumps and
round-trip statistics.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from lossless_xml import __version__
from lossless_xml.api import LosslessXMLParser
from lossless_xml.archive import DEFAULT_MEMBER_SUFFIX, XMLArchive
from lossless_xml.shared import (
    ConfigError,
    LosslessXMLError,
    ParserConfig,
    configure_logging,
    get_logger,
)
from lossless_xml.tokenization import TagTokenizer
from lossless_xml.tools import RoundTripProfiler
from lossless_xml.tree import XMLNode

PRESETS = {
    "default": ParserConfig,
    "strict": ParserConfig.strict,
    "compact": ParserConfig.compact,
}

logger = get_logger(__name__, None, "cli")


def parse_set_expression(expression: str) -> Tuple[str, str, str]:
    """Split ``PATH@ATTR=VALUE`` into its three parts.

    Examples:
        >>> parse_set_expression("game/info@name=Arda - 2")
        ('game/info', 'name', 'Arda - 2')

    Raises:
        ValueError: The expression is missing ``@`` or ``=``
    """
    path, at, assignment = expression.partition("@")
    name, equals, value = assignment.partition("=")
    if not at or not equals or not name:
        raise ValueError(f"Expected PATH@ATTR=VALUE, got {expression!r}")
    return path, name, value


def apply_edits(
    root: XMLNode,
    assignments: Optional[List[str]] = None,
    removals: Optional[List[str]] = None
) -> int:
    """Apply ``--set`` and ``--remove`` edits to a parsed tree.

    Returns:
        Number of edits applied

    Raises:
        ValueError: An expression is malformed or a path does not resolve
    """
    applied = 0
    for expression in assignments or []:
        path, name, value = parse_set_expression(expression)
        _resolve(root, path).set_attribute(name, value)
        applied += 1

    for path in removals or []:
        parent_path, _, _ = path.rstrip("/").rpartition("/")
        node = _resolve(root, path)
        _resolve(root, parent_path).remove(node)
        applied += 1

    logger.debug("Edits applied", extra={"edit_count": applied})
    return applied


def _resolve(root: XMLNode, path: str) -> XMLNode:
    try:
        return root.resolve(path)
    except KeyError as e:
        raise ValueError(f"Path {path!r} does not resolve: {e.args[0]}") from e


def load_config(args: argparse.Namespace) -> ParserConfig:
    """Build the parser configuration from ``--config`` and ``--preset``."""
    if args.config:
        return ParserConfig.from_json(args.config.read_text(encoding="utf-8"))
    return PRESETS[args.preset]()


def cmd_format(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle format command."""
    parser = LosslessXMLParser(config)
    root = parser.parse_file(args.input, args.encoding)
    apply_edits(root, args.set, args.remove)

    if args.output:
        parser.write_file(root, args.output, args.encoding)
        print(f"Written to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(parser.serialize(root))
    return 0


def cmd_archive(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle archive command."""
    parser = LosslessXMLParser(config)
    archive = XMLArchive.open(args.archive)
    member = archive.find_member(args.member_suffix)

    root = parser.parse(archive.read_text(member, args.encoding))
    apply_edits(root, args.set, args.remove)
    archive.replace_text(member, parser.serialize(root), args.encoding)

    output_path = archive.save(args.output)
    print(f"Updated {member} -> {output_path}", file=sys.stderr)
    return 0


def cmd_tags(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle tags command."""
    text = args.input.read_text(encoding=args.encoding)
    tags = TagTokenizer(config.tokenizer).tokenize(text)

    if args.format == "json":
        print(json.dumps(tags, indent=2))
    else:
        for tag in tags:
            print(tag)
    return 0


def cmd_stats(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle stats command."""
    text = args.input.read_text(encoding=args.encoding)
    parse_result = LosslessXMLParser(config).parse_document(text)
    profile = RoundTripProfiler(
        config, enable_memory_tracking=not args.no_memory
    ).profile(text)

    report = {"file": str(args.input)}
    report.update(parse_result.to_dict())
    report["roundtrip"] = profile.to_dict()
    print(json.dumps(report, indent=2))
    return 0


def _add_input_options(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--encoding",
        default="utf-8",
        help="Text encoding of the document (default: utf-8)"
    )


def _add_edit_options(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--set",
        action="append",
        metavar="PATH@ATTR=VALUE",
        help="Set an attribute on the node at an alias path (repeatable)"
    )
    subparser.add_argument(
        "--remove",
        action="append",
        metavar="PATH",
        help="Remove the node at an alias path (repeatable)"
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="lossless-xml",
        description="Lossless XML round-tripping with alias-based editing"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Format command
    format_parser = subparsers.add_parser(
        "format", help="Round-trip an XML file, optionally applying edits"
    )
    format_parser.add_argument("input", type=Path, help="XML file to read")
    format_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    _add_input_options(format_parser)
    _add_edit_options(format_parser)

    # Archive command
    archive_parser = subparsers.add_parser(
        "archive", help="Round-trip the XML member of a zip archive"
    )
    archive_parser.add_argument("archive", type=Path, help="Zip archive to read")
    archive_parser.add_argument(
        "--member-suffix", "-m",
        default=DEFAULT_MEMBER_SUFFIX,
        help=f"Suffix of the member to edit (default: {DEFAULT_MEMBER_SUFFIX})"
    )
    archive_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output archive (default: <stem>-2.zip next to the input)"
    )
    _add_input_options(archive_parser)
    _add_edit_options(archive_parser)

    # Tags command
    tags_parser = subparsers.add_parser("tags", help="Dump the tokenizer output")
    tags_parser.add_argument("input", type=Path, help="XML file to read")
    tags_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )
    _add_input_options(tags_parser)

    # Stats command
    stats_parser = subparsers.add_parser(
        "stats", help="Report element counts, timing and memory as JSON"
    )
    stats_parser.add_argument("input", type=Path, help="XML file to read")
    stats_parser.add_argument(
        "--no-memory",
        action="store_true",
        help="Skip resident memory sampling"
    )
    _add_input_options(stats_parser)

    # Global options
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Parser configuration JSON file"
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Parser configuration preset (ignored with --config)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


COMMANDS = {
    "format": cmd_format,
    "archive": cmd_archive,
    "tags": cmd_tags,
    "stats": cmd_stats,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)

        # Set up logging verbosity
        if args.verbose:
            configure_logging("DEBUG")
        elif args.quiet:
            configure_logging("ERROR")
        else:
            configure_logging(config.global_.logging_level)

        return COMMANDS[args.command](args, config)
    except (LosslessXMLError, ConfigError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
