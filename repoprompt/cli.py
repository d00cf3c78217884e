"""CLI entrypoints for repoprompt commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from .logging import configure_logging
from .models import PromptLibrary
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write log records to this file.",
    )


def _add_analysis_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="GLOB",
        help="Glob of paths to leave out of the scan. Repeat for several patterns.",
    )
    parser.add_argument(
        "--sample-limit",
        type=int,
        default=None,
        help="Maximum number of files sampled per heuristic.",
    )
    parser.add_argument(
        "--max-file-size-kb",
        type=int,
        default=None,
        help="Files larger than this are never read.",
    )
    parser.add_argument(
        "--no-tests",
        action="store_true",
        help="Do not extract examples from test files.",
    )
    parser.add_argument(
        "--facets",
        default=None,
        help="Comma-separated facets to run (documentation,workflow,dependencies,incident,governance,business).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the JSON result to this file instead of stdout.",
    )
    _add_verbose_option(parser, suppress_default=True)
    _add_log_file_option(parser, suppress_default=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoprompt",
        description="Analyze a repository and synthesize evidence-backed development prompts.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a repository and print the analysis as JSON.",
    )
    _add_analysis_options(analyze_parser)

    prompts_parser = subparsers.add_parser(
        "prompts",
        help="Analyze a repository and print its prompt library as JSON.",
    )
    _add_analysis_options(prompts_parser)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Synthesize the prompt library and print its validation report as JSON.",
    )
    _add_analysis_options(validate_parser)
    validate_parser.add_argument(
        "--min-score",
        type=int,
        default=None,
        help="Exit with status 1 when the overall validation score is below this value.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_log_file_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {
        "exclude_patterns": args.exclude,
        "sample_limit": args.sample_limit,
        "max_file_size_kb": args.max_file_size_kb,
    }
    if args.no_tests:
        overrides["include_tests"] = False
    if args.facets:
        overrides["facets"] = [name.strip() for name in args.facets.split(",") if name.strip()]
    return {key: value for key, value in overrides.items() if value is not None}


def _validation_report(library: PromptLibrary) -> Dict[str, Any]:
    prompts = []
    for prompt in library.prompts():
        entry: Dict[str, Any] = {"id": prompt.id, "title": prompt.title, "subPrompts": len(prompt.sub_prompts)}
        if prompt.validation is not None:
            entry.update(prompt.validation.to_dict())
        prompts.append(entry)
    return {
        "repoName": library.metadata.repo_name,
        "score": library.metadata.validation_score,
        "recommendations": list(library.metadata.validation_recommendations),
        "prompts": prompts,
    }


def _emit(payload: Dict[str, Any], output: Path | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output is None:
        print(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    print(f"Wrote {_relativize(output)}")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repoprompt commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
        return

    orchestrator = Orchestrator(config_overrides=_overrides(args))
    try:
        if args.command == "analyze":
            payload = orchestrator.analyze(args.path).to_dict()
        elif args.command == "prompts":
            _, library = orchestrator.generate(args.path)
            payload = library.to_dict()
        elif args.command == "validate":
            _, library = orchestrator.generate(args.path)
            payload = _validation_report(library)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except RuntimeError as exc:
        parser.exit(1, f"repoprompt {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    _emit(payload, args.output)

    if args.command == "validate" and args.min_score is not None and payload["score"] < args.min_score:
        parser.exit(1, f"Validation score {payload['score']} is below --min-score {args.min_score}\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
