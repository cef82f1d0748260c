"""CLI tool for tender item matching."""

import argparse
from dataclasses import replace
from pathlib import Path

import structlog

from tendermatch.config import MatchConfig, MatchingOptions
from tendermatch.io import read_itt_items, read_response_items, write_candidates
from tendermatch.logging import configure_logging
from tendermatch.matcher import MatchingEngine, summarize
from tendermatch.normalize import normalize, normalize_item_code
from tendermatch.store import MatchStore
from tendermatch.types import MatchSummary
from tendermatch.workflow import auto_match


def _build_config(args: argparse.Namespace) -> MatchConfig:
    """Build a MatchConfig from CLI args."""
    options = MatchingOptions().with_overrides(
        fuzzy_threshold=args.fuzzy_threshold,
        low_confidence_threshold=args.low_confidence_threshold,
        enable_fuzzy_matching=False if args.no_fuzzy else None,
        max_suggestions=args.max_suggestions,
    )
    return replace(MatchConfig(), options=options)


def cmd_match(args: argparse.Namespace) -> None:
    log = structlog.get_logger()
    try:
        config = _build_config(args)
    except ValueError as e:
        raise SystemExit(f"Invalid matching options: {e}")

    log.info("load_files_start", itt=args.itt, responses=args.responses)
    itt_items = read_itt_items(args.itt)
    response_items = read_response_items(args.responses)
    log.info("files_loaded", itt_count=len(itt_items), response_count=len(response_items))

    if args.matches:
        store = MatchStore(Path(args.matches))
        store.load()
        result = auto_match(args.project, itt_items, response_items, store, config)
        candidates = result.candidates
        print(
            f"Suggestions saved to {args.matches}: created={len(result.created)}, "
            f"already on file={result.skipped_existing}, "
            f"bound response items skipped={result.skipped_bound}"
        )
    else:
        candidates = MatchingEngine(config).find_matches(itt_items, response_items)

    if args.show:
        _show_candidates(candidates)

    _print_summary(summarize(candidates, config.options), len(response_items))

    if args.output:
        write_candidates(candidates, args.output)
        print(f"\nSaved to: {args.output}")


def _show_candidates(candidates: list) -> None:
    """Display candidates on screen."""
    if not candidates:
        print("\n=== No candidates found ===")
        return

    print(f"\n=== Candidates ({len(candidates)}) ===")
    for c in candidates:
        print(f"  {c.response_item_id} -> {c.itt_item_id}  {c.confidence:.3f}  {c.match_type}  {c.reason}")


def _print_summary(summary: MatchSummary, response_count: int) -> None:
    print("\n--- Summary ---")
    print(f"Response items: {response_count}")
    print(f"Response items with candidates: {summary.response_items_matched}")
    print(f"Candidates: {summary.total} (high={summary.high_confidence}, low={summary.low_confidence})")
    parts = [f"{name}={count}" for name, count in summary.by_type.items() if count]
    if parts:
        print(f"By type: {', '.join(parts)}")


def cmd_normalize(args: argparse.Namespace) -> None:
    """Print how descriptions or codes are normalized."""
    for text in args.text:
        if args.code:
            print(f"{text!r} -> {normalize_item_code(text)!r}")
            continue
        result = normalize(text, remove_stopwords=not args.keep_stopwords)
        print(f"{text!r}")
        print(f"  normalized: {result.normalized}")
        print(f"  key:        {result.key}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Launch the review service."""
    import uvicorn

    from tendermatch.server import create_app

    log = structlog.get_logger()
    log.info(
        "review_server_start",
        itt=args.itt,
        responses=args.responses,
        matches=args.matches,
        port=args.port,
    )

    app = create_app(
        itt_path=args.itt,
        responses_path=args.responses,
        matches_path=args.matches,
        project_id=args.project,
    )
    print(f"Starting review service at http://localhost:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")


def main(argv: list[str] | None = None) -> None:
    # Parent parser with global options (inherited by all subcommands)
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )
    parent_parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit JSON log lines instead of console output",
    )

    parser = argparse.ArgumentParser(
        description="Tender item matching CLI",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # match subcommand
    match_parser = subparsers.add_parser("match", parents=[parent_parser], help="Suggest ITT matches for response items")
    match_parser.add_argument("--itt", required=True, help="ITT items file (.csv, .jsonl, .xlsx)")
    match_parser.add_argument("--responses", required=True, help="Response items file (.csv, .jsonl, .xlsx)")
    match_parser.add_argument("--output", help="Write candidates to this file (.csv, .jsonl, .xlsx)")
    match_parser.add_argument("--matches", help="Persist suggestions into this match store (JSON)")
    match_parser.add_argument("--project", default="default", help="Project id for stored matches")
    match_parser.add_argument("--show", action="store_true", help="Display candidates on screen")
    match_parser.add_argument("--fuzzy-threshold", type=float, help="High-confidence cut for reporting (default: 0.75)")
    match_parser.add_argument("--low-confidence-threshold", type=float, help="Minimum confidence kept (default: 0.6)")
    match_parser.add_argument("--max-suggestions", type=int, help="Candidates kept per response item (default: 3)")
    match_parser.add_argument("--no-fuzzy", action="store_true", help="Exact code/description matching only")
    match_parser.set_defaults(func=cmd_match)

    # normalize subcommand
    normalize_parser = subparsers.add_parser("normalize", parents=[parent_parser], help="Show normalized text")
    normalize_parser.add_argument("text", nargs="+", help="Descriptions (or codes with --code)")
    normalize_parser.add_argument("--code", action="store_true", help="Normalize as item codes")
    normalize_parser.add_argument("--keep-stopwords", action="store_true", help="Keep unit and stopword tokens")
    normalize_parser.set_defaults(func=cmd_normalize)

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", parents=[parent_parser], help="Run the match review service")
    serve_parser.add_argument("--itt", required=True, help="ITT items file")
    serve_parser.add_argument("--responses", required=True, help="Response items file")
    serve_parser.add_argument("--matches", default="matches.json", help="Match store path (default: matches.json)")
    serve_parser.add_argument("--project", default="default", help="Project id for stored matches")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8765, help="Server port (default: 8765)")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_output=args.log_json)
    args.func(args)


if __name__ == "__main__":
    main()
