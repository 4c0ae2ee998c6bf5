"""CLI entry point for the resume ranker."""

import argparse
import logging
import os
import sys
from pathlib import Path

from resume_ranker.core.config import Settings
from resume_ranker.core.errors import PipelineError
from resume_ranker.profile.llm import available_providers

DEFAULT_CONFIG = "config/settings.yaml"

EXIT_CONFIG_ERROR = 1
EXIT_ALL_FAILED = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resume ranker - extract candidate profiles and rank them against a job",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- extract-profile subcommand ---
    extract_parser = subparsers.add_parser(
        "extract-profile",
        help="Extract a structured profile from one resume",
    )
    extract_parser.add_argument(
        "--resume",
        required=True,
        help="Path to resume file (PDF, DOCX, DOC or TXT)",
    )
    extract_parser.add_argument(
        "--output",
        default="profile.yaml",
        help="Output path for profile YAML (default: profile.yaml)",
    )
    _add_common_args(extract_parser)

    # --- rank subcommand ---
    rank_parser = subparsers.add_parser(
        "rank",
        help="Rank a batch of resumes against a job",
    )
    rank_parser.add_argument(
        "--job",
        required=True,
        help="Path to job requirement YAML file",
    )
    rank_parser.add_argument(
        "resumes",
        nargs="+",
        help="Resume files to rank, processed in the given order",
    )
    rank_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )
    rank_parser.add_argument(
        "--output",
        help="Write the export to this file instead of stdout",
    )
    _add_common_args(rank_parser)

    return parser.parse_args(argv)


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to settings YAML file (default: {DEFAULT_CONFIG})",
    )
    parser.add_argument(
        "--provider",
        choices=available_providers(),
        help="Completion provider (default: from settings)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str) -> Settings:
    """Load settings; a missing file at the default location means defaults."""
    if path == DEFAULT_CONFIG and not Path(path).exists():
        logging.getLogger(__name__).debug("No %s found, using default settings", path)
        return Settings()
    return Settings.from_yaml(path)


def cmd_extract_profile(args: argparse.Namespace, settings: Settings) -> int:
    """Handle extract-profile subcommand."""
    from resume_ranker.profile.extractor import extract_text, load_document
    from resume_ranker.profile.llm_analyzer import analyze_resume

    print(f"Extracting text from {args.resume}...")
    document = load_document(args.resume)
    extracted = extract_text(document, settings.extraction)
    print(f"Extracted {len(extracted.text)} characters.")
    if extracted.lossy:
        print("Warning: legacy .doc decoded on a best-effort basis; review the profile.")

    provider = args.provider or settings.llm.provider
    print(f"Analyzing resume with {provider} provider...")
    profile = analyze_resume(
        extracted.text,
        provider=provider,
        model=settings.llm.model_for_profile(),
        filename=document.filename,
    )
    profile.to_yaml(args.output)
    print(f"Profile written to {args.output}")
    print(f"  Name: {profile.name or 'not found'}")
    print(f"  Experience: {profile.experience} years")
    print(f"  Skills: {profile.skills}")
    return 0


def cmd_rank(args: argparse.Namespace, settings: Settings) -> int:
    """Handle rank subcommand."""
    from resume_ranker.core.schemas import JobRequirement
    from resume_ranker.core.storage import LocalObjectStore
    from resume_ranker.pipeline.orchestrator import BatchItem, export_results_json, run_batch

    job = JobRequirement.from_yaml(args.job)
    paths = [Path(resume).resolve() for resume in args.resumes]
    store = LocalObjectStore(os.path.commonpath([p.parent for p in paths]))

    items = []
    for index, path in enumerate(paths, start=1):
        items.append(BatchItem(
            item_id=f"{index}",
            path=path.relative_to(store.root).as_posix(),
            filename=path.name,
        ))

    report = run_batch(
        items,
        job,
        store,
        provider=args.provider,
        settings=settings,
    )

    print(f"\nRanking complete for '{job.title}': {report.success_count} succeeded, "
          f"{report.error_count} failed.")
    for outcome in report.ranked():
        print(f"  {outcome.ranking.score:>3}/100  {outcome.filename}")
    for status in report.failures():
        hint = " (retry later)" if status.retryable else ""
        print(f"  ERROR    {status.filename}: {status.error}{hint}")

    if args.export == "json":
        output = export_results_json(report)
        if args.output:
            Path(args.output).write_text(output)
            print(f"\nResults written to {args.output}")
        else:
            print(f"\n{output}")

    if items and report.success_count == 0:
        return EXIT_ALL_FAILED
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    try:
        if args.command == "extract-profile":
            code = cmd_extract_profile(args, settings)
        else:
            code = cmd_rank(args, settings)
    except (FileNotFoundError, ImportError, ValueError, PipelineError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
