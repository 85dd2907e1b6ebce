from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    # When running as scripts/lookup.py, sys.path[0] is scripts/,
    # so `import src.*` fails unless the project root is on sys.path.
    sys.path.insert(0, str(PROJECT_ROOT))

from src.collector.api_client import CountriesAPIClient  # noqa: E402
from src.page.controller import PageController  # noqa: E402
from src.page.elements import Page  # noqa: E402
from src.render.cards import CARD_CONTAINER_ID, FILTER_SELECT_ID, SEARCH_INPUT_ID, SHOW_ALL_ID  # noqa: E402
from src.search.controller import SearchController, SearchStatus  # noqa: E402
from src.search.filters import FilterKind  # noqa: E402
from src.utils.config import load_api_config, load_ui_config  # noqa: E402
from src.utils.logging import get_logger, setup_logging  # noqa: E402

logger = get_logger(component="lookup")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Look up countries on the REST Countries API.")
    p.add_argument("term", nargs="?", default="", help="Search text; empty lists every country.")
    p.add_argument(
        "--kind",
        default=FilterKind.NAME.value,
        help="Filter kind: name, region, capital, language, population_gte, population_lte (or selector code 0-5).",
    )
    p.add_argument("--json", action="store_true", help="Print display records as JSON instead of text.")
    p.add_argument("--config", default=None, help="Path to api.yaml (default: config/api.yaml).")
    p.add_argument("--watch", action="store_true", help="Interactive mode: each stdin line is the new input text (debounced).")
    return p.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    cfg = load_api_config(args.config)
    page = Page.default()
    page.get(SEARCH_INPUT_ID).value = args.term
    page.get(FILTER_SELECT_ID).value = args.kind

    async with CountriesAPIClient(base_url=cfg.base_url, timeout_seconds=cfg.timeout_seconds) as client:
        outcome = await SearchController(client=client, page=page).run()

    container = page.get(CARD_CONTAINER_ID)
    if args.json:
        payload = [card.record.as_dict() for card in container.cards if card.record is not None]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(container.to_text())

    logger.info("lookup_complete", status=outcome.status.value, count=outcome.count)
    return 0 if outcome.status in (SearchStatus.RENDERED, SearchStatus.EMPTY) else 1


async def _watch(args: argparse.Namespace) -> int:
    """
    Line-driven page session:
      <text>        replace the search text (debounced)
      :kind <kind>  change the filter kind
      :all          show every country
      :quit         exit
    """
    cfg = load_api_config(args.config)
    ui = load_ui_config(args.config)
    page = Page.default()
    page.get(FILTER_SELECT_ID).value = args.kind
    loop = asyncio.get_running_loop()

    async with CountriesAPIClient(base_url=cfg.base_url, timeout_seconds=cfg.timeout_seconds) as client:
        controller = PageController(
            page=page,
            search=SearchController(client=client, page=page),
            debounce_seconds=ui.debounce_ms / 1000.0,
        )
        await controller.start()
        printed = 0
        while True:
            if len(controller.outcomes) > printed:
                printed = len(controller.outcomes)
                print(page.get(CARD_CONTAINER_ID).to_text(), flush=True)

            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line or line.strip() == ":quit":
                break
            line = line.rstrip("\n")
            if line == ":all":
                page.get(SHOW_ALL_ID).click()
            elif line.startswith(":kind "):
                page.get(FILTER_SELECT_ID).choose(line[len(":kind "):].strip())
            else:
                page.get(SEARCH_INPUT_ID).enter(line)
                await asyncio.sleep(controller.debouncer.delay_seconds)
            await controller.drain()

        controller.debouncer.cancel()
        await controller.drain()
    return 0


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = _parse_args(argv)
    if args.watch:
        return asyncio.run(_watch(args))
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
