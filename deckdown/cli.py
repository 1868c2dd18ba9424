"""Command-line entry point: compile a markdown deck to JSON slide IR."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .local_image import DEFAULT_MAX_IMAGE_SIZE
from .markdown_parser import MarkdownParser
from .models import slides_to_json

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="deckdown", description="Compile a Markdown deck into slide JSON.")
    sub = p.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Parse a deck and print or write its JSON")
    build.add_argument("markdown", type=Path, help="Markdown file to compile")
    build.add_argument("--output", "-o", type=Path, help="Destination JSON path (default: stdout)")
    build.add_argument("--base-dir", type=Path, help="Base directory for local images (default: parent of markdown file)")
    build.add_argument("--max-image-size", type=int, default=DEFAULT_MAX_IMAGE_SIZE, help="Largest local image to embed, in bytes")
    build.add_argument("--indent", type=int, default=2, help="JSON indentation")
    build.add_argument("--debug", action="store_true", help="Enable verbose logging")
    return p


def _build(args) -> int:
    md_path: Path = args.markdown
    if not md_path.exists():
        logger.error(f"Markdown file '{md_path}' not found")
        return 1

    base_dir = args.base_dir if args.base_dir else md_path.parent
    parser = MarkdownParser(base_dir=base_dir, max_image_size=args.max_image_size)
    slides = parser.parse(md_path.read_text(encoding="utf-8"))
    payload = slides_to_json(slides, indent=args.indent)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"✅ Wrote {len(slides)} slide(s) to {args.output}")
    else:
        sys.stdout.write(payload + "\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point for deckdown."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s  %(message)s",
    )
    if args.command == "build":
        return _build(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
