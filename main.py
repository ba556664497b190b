# main.py
"""CLI entry point for the contextual prompt engine."""

from __future__ import annotations

import argparse
import json

from utils.logging import setup_logging_engine

from prompt_engine import ContextualPromptEngine, EngineConfig


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build an annotated prompt header for a genre and arc."
    )
    parser.add_argument("--tone", default="friendly")
    parser.add_argument("--language", default="en")
    parser.add_argument("--genre", default="")
    parser.add_argument("--scene", default="")
    parser.add_argument("--arc", default="setup")
    parser.add_argument("--character", default=None, help="Character name to inject")
    parser.add_argument("--debug", action="store_true", help="Emit fallback warnings")
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Print fallback statistics as JSON after the header",
    )
    parser.add_argument(
        "--list-genres", action="store_true", help="List genres and arcs, then exit"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse command-line arguments and print the resulting header."""
    args = _build_parser().parse_args(argv)
    setup_logging_engine()

    config = EngineConfig.from_settings()
    if args.debug:
        config = config.model_copy(update={"debug": True})
    engine = ContextualPromptEngine(config)

    if args.list_genres:
        print("Genres: " + ", ".join(engine.library.get_available_genres()))
        print("Arcs: " + ", ".join(engine.library.get_available_arcs()))
        return

    result = engine.build_contextual_prompt_header(
        {"tone": args.tone, "language": args.language, "genre": args.genre},
        {"scene": args.scene, "arc": args.arc, "character_name": args.character},
    )
    print(result.header, end="")

    if args.diagnostics:
        print(json.dumps(engine.get_fallback_stats().model_dump(), indent=2))


if __name__ == "__main__":
    main()
