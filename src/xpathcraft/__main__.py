from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from .errors import OracleSyntaxError
from .locator_generator import LocatorGenerator
from .lxml_adapter import LxmlTreeAdapter
from .tree import TreeAdapter

logger = logging.getLogger("xpathcraft.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xpathcraft",
        description="Synthesize a robust, unique XPath locator for one element of an HTML page.",
    )
    parser.add_argument("source", help="Path to an HTML file, or an http(s) URL opened with Playwright")
    parser.add_argument("--target", required=True, help="XPath selecting the element to locate (first match is used)")
    parser.add_argument("--validate", metavar="EXPR", help="Validate EXPR against the target instead of generating")
    parser.add_argument("--headed", action="store_true", help="Show the browser window for URL sources")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def run(adapter: TreeAdapter, target_expression: str, validate: str | None = None) -> tuple[dict[str, Any], int]:
    generator = LocatorGenerator(adapter)
    try:
        matches = generator.oracle.evaluate(target_expression)
    except OracleSyntaxError as exc:
        return {"success": False, "error": f"Invalid --target expression: {exc.reason}"}, 2
    if not matches:
        return {"success": False, "error": "Target element not found"}, 1
    target = matches[0]

    if validate:
        report = generator.validate(validate, target)
        record = {
            "valid": report.valid,
            "unique": report.unique,
            "correct": report.correct,
            "matchCount": report.match_count,
            "message": report.message,
        }
        return record, 0 if report.correct and report.unique else 1

    result = generator.generate_locator(target)
    return result.to_record(), 0 if result.success else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.source.startswith(("http://", "https://")):
        record, code = _run_on_url(args.source, args.target, args.validate, headless=not args.headed)
    else:
        path = Path(args.source)
        if not path.is_file():
            print(f"[xpathcraft] file not found: {path}", file=sys.stderr)
            return 2
        adapter = LxmlTreeAdapter.from_html(path.read_bytes())
        record, code = run(adapter, args.target, args.validate)

    print(json.dumps(record, indent=2, ensure_ascii=False))
    return code


def _run_on_url(url: str, target: str, validate: str | None, headless: bool) -> tuple[dict[str, Any], int]:
    from playwright.sync_api import sync_playwright

    from .playwright_adapter import PlaywrightTreeAdapter

    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=headless)
        try:
            page = browser.new_page()
            page.goto(url, wait_until="domcontentloaded")
            logger.info("Loaded %s", url)
            return run(PlaywrightTreeAdapter(page), target, validate)
        finally:
            browser.close()


if __name__ == "__main__":
    raise SystemExit(main())
