"""CLI for inspecting and normalizing questionnaire record files."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import BuilderSettings
from .graph.model import QuestionNotFound
from .records.importer import ImportResult, StructuralValidationError, import_text
from .session import EditorSession


def _load(path: str) -> ImportResult:
    return import_text(Path(path).read_text(encoding="utf-8"))


def _print_warnings(result: ImportResult) -> None:
    for warning in result.warnings:
        print(f"  ! [{warning.code}] {warning.message}")


def cmd_inspect(args: argparse.Namespace) -> int:
    result = _load(args.file)
    graph = result.graph
    edges = graph.edges()
    print(f"\nQuestionnaire: {graph.meta.name or '(unnamed)'}")
    print(f"Questions: {len(graph)}")
    print(f"Connections: {len(edges)}")
    for question in graph:
        connection = graph.get_connection(question.id)
        targets = ", ".join(f"{slot} -> {target}" for slot, target in connection.items() if target)
        print(f"  [{question.type.value}] {question.id}: {question.text} {targets}".rstrip())
    print(f"Warnings: {len(result.warnings)}")
    _print_warnings(result)
    return 0


def cmd_normalize(args: argparse.Namespace) -> int:
    result = _load(args.file)
    session = EditorSession(result.graph, settings=BuilderSettings.from_env())
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(session.export_text(), encoding="utf-8")
    print(f"Normalized records written to: {output_path.resolve()}")
    _print_warnings(result)
    return 0


def cmd_criteria(args: argparse.Namespace) -> int:
    session = EditorSession(_load(args.file).graph)
    for option in session.available_criteria_options(args.question_id):
        print(f"{option['value']}\t{option['label']}")
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    session = EditorSession(_load(args.file).graph)
    positions = {node: position.to_dict() for node, position in session.layout().items()}
    print(json.dumps(positions, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Questionnaire graph record tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m qbuilder.cli inspect questions.json
  python -m qbuilder.cli normalize questions.json -o outputs/questions.json
  python -m qbuilder.cli criteria questions.json 7f1c2a4e-...
  python -m qbuilder.cli layout questions.json
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a record file")
    inspect_parser.add_argument("file", help="Path to a flat record JSON file")
    inspect_parser.set_defaults(handler=cmd_inspect)

    normalize_parser = subparsers.add_parser("normalize", help="Re-export with fresh identifiers")
    normalize_parser.add_argument("file", help="Path to a flat record JSON file")
    normalize_parser.add_argument("--output", "-o", required=True, help="Output file")
    normalize_parser.set_defaults(handler=cmd_normalize)

    criteria_parser = subparsers.add_parser("criteria", help="List criteria available on a question's edges")
    criteria_parser.add_argument("file", help="Path to a flat record JSON file")
    criteria_parser.add_argument("question_id", help="Question record pk")
    criteria_parser.set_defaults(handler=cmd_criteria)

    layout_parser = subparsers.add_parser("layout", help="Print node coordinates as JSON")
    layout_parser.add_argument("file", help="Path to a flat record JSON file")
    layout_parser.set_defaults(handler=cmd_layout)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except StructuralValidationError as exc:
        print(f"Import failed: {exc}", file=sys.stderr)
    except QuestionNotFound as exc:
        print(f"Unknown question: {exc.args[0]}", file=sys.stderr)
    except OSError as exc:
        print(f"Cannot read {args.file}: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
