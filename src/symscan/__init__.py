import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import TextIO, cast

from rich.console import Console
from rich.logging import RichHandler

from symscan.defines import DefineResolver, prepare_define_text, scan_defines
from symscan.diag import Diagnostic, SymscanError
from symscan.frontend import SourceTree, option_values, read_source
from symscan.options import SourceOptions

Result = dict[str, object] | list[object] | int | str
Outcome = tuple[Result, Diagnostic | None]


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract constants, tables and script labels from game source trees."
    )
    parser.add_argument("--root", default=".", help="project root that file paths are relative to")
    parser.add_argument("-D", dest="defines", action="append", default=[], help="known value NAME=VALUE")
    parser.add_argument(
        "--format",
        dest="diag_format",
        choices=("human", "json"),
        default="human",
        help="output and diagnostic format",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    commands = parser.add_subparsers(dest="command", required=True)

    defines = commands.add_parser("defines", help="evaluate #define and enum constants")
    defines.add_argument("file")
    defines.add_argument("names", nargs="+", help="define names, or patterns with --regex")
    defines.add_argument("--regex", action="store_true", help="treat names as regular expressions")

    define_names = commands.add_parser("define-names", help="list define names matching patterns")
    define_names.add_argument("file")
    define_names.add_argument("patterns", nargs="+")

    evaluate = commands.add_parser("eval", help="evaluate an integer expression")
    evaluate.add_argument("expression")
    evaluate.add_argument("--file", help="header whose defines the expression may reference")

    array = commands.add_parser("array", help="read a flat C array, or all arrays without a label")
    array.add_argument("file")
    array.add_argument("label", nargs="?")

    named_array = commands.add_parser("named-array", help="read a [INDEX] = VALUE table")
    named_array.add_argument("file")
    named_array.add_argument("label")

    incbin = commands.add_parser("incbin", help="read INCBIN paths")
    incbin.add_argument("file")
    incbin.add_argument("label", nargs="?")
    incbin.add_argument("--array", action="store_true", help="read every INCBIN inside an array")

    struct = commands.add_parser("struct", help="read struct initializers")
    struct.add_argument("file")
    struct.add_argument("label", nargs="?", default="")
    struct.add_argument(
        "--member",
        dest="members",
        action="append",
        default=[],
        help="name positional member INDEX=NAME",
    )

    script_line = commands.add_parser("script-line", help="find the line defining a script label")
    script_line.add_argument("file")
    script_line.add_argument("label")

    asm_data = commands.add_parser("asm", help="read assembly data rows, or the values under a label")
    asm_data.add_argument("file")
    asm_data.add_argument("label", nargs="?")
    asm_data.add_argument("--macros", action="store_true", help="print whole macro rows under the label")

    script_labels = commands.add_parser("script-labels", help="list globally visible script labels")
    script_labels.add_argument("file")
    return parser


def _configure_logging(verbose: bool) -> None:
    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def _parse_member_map(members: Sequence[str]) -> dict[int, str]:
    member_map: dict[int, str] = {}
    for member in members:
        index, _, name = member.partition("=")
        if not index.isdigit() or not name:
            raise ValueError(f"Invalid member mapping: {member}")
        member_map[int(index)] = name
    return member_map


def _evaluate(
    tree: SourceTree,
    options: SourceOptions,
    args: argparse.Namespace,
    stdin: TextIO | None,
) -> int:
    expressions: dict[str, str] = {}
    text = ""
    if args.file == "-":
        _, text = read_source("-", stdin=stdin)
    elif args.file is not None:
        text = tree.read_text(args.file)
    if text:
        expressions = scan_defines(text).expressions
    resolver = DefineResolver(
        expressions,
        known=option_values(options),
        text=prepare_define_text(text),
        filename=args.file or "<expression>",
    )
    value = resolver.evaluate(args.expression)
    resolver.log_errors("<expression>")
    return value


def _run(
    tree: SourceTree,
    options: SourceOptions,
    args: argparse.Namespace,
    stdin: TextIO | None,
) -> Outcome:
    command = args.command
    if command == "defines":
        if args.regex:
            return cast(Outcome, tree.read_c_defines_by_regex(args.file, args.names))
        return cast(Outcome, tree.read_c_defines_by_name(args.file, args.names))
    if command == "define-names":
        return cast(Outcome, tree.read_c_define_names(args.file, args.patterns))
    if command == "eval":
        return _evaluate(tree, options, args, stdin), None
    if command == "array":
        if args.label is None:
            return cast(Result, tree.read_c_array_multi(args.file)), None
        return cast(Result, tree.read_c_array(args.file, args.label)), None
    if command == "named-array":
        return cast(Outcome, tree.read_named_index_c_array(args.file, args.label))
    if command == "incbin":
        if args.array:
            return cast(Result, tree.read_c_incbin_array(args.file, args.label or "")), None
        if args.label is None:
            return cast(Result, tree.read_c_incbin_multi(args.file)), None
        return tree.read_c_incbin(args.file, args.label), None
    if command == "struct":
        member_map = _parse_member_map(args.members)
        return cast(Result, tree.read_c_structs(args.file, args.label, member_map)), None
    if command == "asm":
        if args.label is None:
            return cast(Result, tree.parse_asm(args.file)), None
        if args.macros:
            return cast(Result, tree.get_label_macros(args.file, args.label)), None
        return cast(Result, tree.get_label_values(args.file, args.label)), None
    if command == "script-line":
        return tree.get_script_line_number(args.file, args.label), None
    return cast(Result, tree.get_global_script_labels(args.file)), None


def _format_row(row: list[object]) -> str:
    # [".4byte", "1", "2"] -> ".4byte 1, 2"
    head, *params = (str(item) for item in row)
    return f"{head} {', '.join(params)}" if params else head


def _format_human(result: Result) -> list[str]:
    if isinstance(result, dict):
        lines: list[str] = []
        for key, value in result.items():
            if isinstance(value, dict):
                lines.extend(f"{key}.{member}={text}" for member, text in value.items())
            elif isinstance(value, list):
                lines.append(f"{key}={', '.join(str(item) for item in value)}")
            else:
                lines.append(f"{key}={value}")
        return lines
    if isinstance(result, list):
        return [_format_row(item) if isinstance(item, list) else str(item) for item in result]
    return [str(result)]


def main(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None) -> int:
    parser = _build_arg_parser()
    effective_argv = list(argv) if argv is not None else sys.argv[1:]
    try:
        args = parser.parse_args(effective_argv)
    except SystemExit as error:
        return cast(int, error.code)
    _configure_logging(args.verbose)
    try:
        options = SourceOptions(
            root=args.root,
            defines=tuple(args.defines),
            diag_format=args.diag_format,
        )
        tree = SourceTree(options)
        result, diagnostic = _run(tree, options, args, stdin)
    except ValueError as error:
        print(f"symscan: error: {error}", file=sys.stderr)
        return 1 if isinstance(error, SymscanError) else 2
    if diagnostic is not None:
        if args.diag_format == "json":
            print(json.dumps(diagnostic.as_dict(), separators=(",", ":")), file=sys.stderr)
        else:
            print(diagnostic, file=sys.stderr)
        return 1
    if args.diag_format == "json":
        print(json.dumps(result, separators=(",", ":")))
    else:
        for line in _format_human(result):
            print(line)
    return 0
