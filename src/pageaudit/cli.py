# src/pageaudit/cli.py
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from tqdm.auto import tqdm

from pageaudit.controllers.analysis_controller import AnalysisController
from pageaudit.managers.config_manager import config_manager
from pageaudit.services.json_service import to_json
from pageaudit.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)

SUBCOMMANDS = ("head", "seo", "links", "all")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pageaudit", description="Audit HTML documents for SEO and link integrity.")
    subparsers = parser.add_subparsers(dest="subcommand", required=True, help="Audit subcommands")

    for name, help_text in (
            ("head", "Score head-level SEO tags"),
            ("seo", "Full-page SEO score"),
            ("links", "Audit links and image attributes"),
            ("all", "Run every analyzer"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("files", nargs="+", type=Path, help="HTML files, or JSON files shaped like {\"html\": ...}.")
        sub.add_argument("--log-level", type=str, default=None, help="Override the configured log level.")
        if name in ("seo", "all"):
            sub.add_argument("--offline", action="store_true", help="Skip the scoring API and score locally.")
            sub.add_argument("--api-url", type=str, default=None, help="Scoring API endpoint.")

    return parser


def read_document(path: Path) -> str:
    """
    Reads page HTML from disk. JSON files are expected to carry the
    page-retrieval response shape {"html": "..."}.
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() != ".json":
        return text

    payload = json.loads(text)
    if not isinstance(payload, dict) or not isinstance(payload.get("html"), str):
        raise ValueError(f"{path} does not contain an 'html' string")
    return payload["html"]


async def _run_one(controller: AnalysisController, subcommand: str, html: str):
    if subcommand == "head":
        return controller.analyze_head(html)
    if subcommand == "links":
        return controller.audit_links(html)
    if subcommand == "seo":
        return await controller.score_seo(html)
    return await controller.analyze_page(html)


async def run(parsed_args: argparse.Namespace) -> int:
    config = config_manager.build_analyzer_config(api_url=getattr(parsed_args, "api_url", None))
    controller = AnalysisController(config, offline=getattr(parsed_args, "offline", False))

    results: Dict[str, object] = {}
    exit_code = 0
    files: List[Path] = parsed_args.files

    for path in tqdm(files, desc="Auditing", unit="page", disable=len(files) < 2):
        try:
            html = read_document(path)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            print(f"❌ Could not read {path}: {e}", file=sys.stderr)
            exit_code = 1
            continue

        results[str(path)] = await _run_one(controller, parsed_args.subcommand, html)

    if len(files) == 1:
        output = next(iter(results.values()), None)
    else:
        output = results

    if output is not None:
        print(to_json(output))
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    parsed_args = build_parser().parse_args(argv)

    configure_logger(
        parsed_args.log_level or config_manager.get_nested("logging.level", "WARNING"),
        module_specific_levels=config_manager.get_nested("logging.modules"),
        silenced_loggers=config_manager.get_nested("logging.silenced"),
    )

    return asyncio.run(run(parsed_args))


if __name__ == "__main__":
    sys.exit(main())
