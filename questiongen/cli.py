"""Command line front end for question generation.

Each command prints the JSON list of produced file names on success and
exits with status 1 and a one-line error otherwise.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .exceptions import GenerationError, QuestionGenError
from .generation import annotate_answer_tags, annotate_subject_names, generate_mcq, generate_saq
from .storage import sweep_expired_files
from .utils import debug


def _add_set_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--sets", type=int, default=1, help="Number of sets; more than 1 enables multi-set mode")
    parser.add_argument("--output-dir", help="Directory for generated files (default: QGEN_OUTPUT_DIR)")
    parser.add_argument("--template", help="Sample .docx to clone questions from")
    parser.add_argument("--suffix", help="Extra text inserted into every output file name")


def _parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="questiongen", description="Assemble exam question documents")
    parser.add_argument("--debug", dest="debug", action="store_true", default=None, help="Verbose debug logging")
    parser.add_argument("--no-debug", dest="debug", action="store_false", help="Disable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    mcq = commands.add_parser("mcq", help="Generate multiple-choice question sets")
    mcq.add_argument("--count", type=int, required=True, help="Questions per set")
    mcq.add_argument("--subjects", required=True, help='Comma-separated subjects, e.g. "phy,chem"')
    mcq.add_argument("--sequences", required=True, help='Comma-separated ranges, e.g. "1-25,26-50"')
    mcq.add_argument("--answer-tags", action="store_true", help="Mark the correct option of each question")
    _add_set_options(mcq)

    saq = commands.add_parser("saq", help="Generate short-answer question sets")
    saq.add_argument("--marks", type=int, required=True, help="Mark value written on every question")
    saq.add_argument("--subjects-native", required=True, help="Comma-separated subjects in the native script")
    saq.add_argument("--subjects-latin", required=True, help="Comma-separated subjects in Latin script")
    saq.add_argument("--sequences", required=True, help="Comma-separated serial ranges")
    saq.add_argument("--cap", type=int, help="At most this many questions per range")
    _add_set_options(saq)

    tags = commands.add_parser("answer-tags", help="Mark answers in an uploaded document")
    tags.add_argument("docx_path", help="Path to the uploaded .docx")
    tags.add_argument("-o", "--out", help="Write here instead of updating in place")

    names = commands.add_parser("subject-names", help="Write subject names into an uploaded document")
    names.add_argument("docx_path", help="Path to the uploaded .docx")
    names.add_argument("--subjects", required=True)
    names.add_argument("--sequences", required=True)
    names.add_argument("-o", "--out", help="Write here instead of updating in place")

    cleanup = commands.add_parser("cleanup", help="Delete expired generated and uploaded files")
    cleanup.add_argument("--max-age-minutes", type=float, help="Override QGEN_RETENTION_MINUTES")

    return parser.parse_args(argv)


def _run(args: argparse.Namespace) -> List[str]:
    if args.command == "mcq":
        return generate_mcq(
            args.count,
            args.subjects,
            args.sequences,
            include_answer_tags=args.answer_tags,
            multi_set=args.sets > 1,
            set_count=args.sets,
            output_dir=Path(args.output_dir) if args.output_dir else None,
            template=Path(args.template) if args.template else None,
            name_suffix=args.suffix,
        )
    if args.command == "saq":
        return generate_saq(
            args.marks,
            args.subjects_native,
            args.subjects_latin,
            args.sequences,
            cap=args.cap,
            multi_set=args.sets > 1,
            set_count=args.sets,
            output_dir=Path(args.output_dir) if args.output_dir else None,
            template=Path(args.template) if args.template else None,
            name_suffix=args.suffix,
        )
    if args.command == "answer-tags":
        target = Path(args.out or args.docx_path)
        annotate_answer_tags(Path(args.docx_path), Path(args.out) if args.out else None)
        return [target.name]
    if args.command == "subject-names":
        target = Path(args.out or args.docx_path)
        annotate_subject_names(
            Path(args.docx_path),
            args.subjects,
            args.sequences,
            Path(args.out) if args.out else None,
        )
        return [target.name]
    return sweep_expired_files(max_age_minutes=args.max_age_minutes)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_arguments(argv)
    if args.debug is not None:
        debug.set_debug(args.debug)

    try:
        produced = _run(args)
    except GenerationError as exc:
        print(f"Error: {exc} (completed: {', '.join(exc.completed_files) or 'none'})", file=sys.stderr)
        sys.exit(1)
    except QuestionGenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(produced, ensure_ascii=False))


if __name__ == "__main__":
    main()
