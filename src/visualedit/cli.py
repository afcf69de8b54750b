"""Command-line access to the Parsoid dispatch layer and the save pipeline.

Usage:
    visualedit fetch "Main Page" --oldid 1234 --output page.html
    visualedit to-html "Main Page" notes.wiki
    visualedit save page.html --title "Main Page" --etag 'W/"direct:1234/abc"'
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.panel import Panel

from visualedit import _setup_logging
from visualedit.config import get_settings
from visualedit.errors import ActionApiError, ApiUsageError, NoErrorNoSuccessError
from visualedit.parsoid.models import PageIdentity, RevisionRecord

if TYPE_CHECKING:
    from visualedit.api import ApiParsoidHandler

console = Console()


def _build_parser() -> argparse.ArgumentParser:
    """Build argparse parser for the visualedit subcommands."""
    parser = argparse.ArgumentParser(
        prog="visualedit",
        description="Fetch, convert and save wiki pages through Parsoid.",
    )
    parser.add_argument(
        "--user", default="Anonymous", help="User name requests are made for"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # fetch
    fetch_p = sub.add_parser("fetch", help="Fetch the HTML of a page revision")
    fetch_p.add_argument("title", help="Page title")
    fetch_p.add_argument("--oldid", default="", help="Revision id (empty or 0: latest)")
    fetch_p.add_argument("--output", type=Path, help="Write the HTML to this file")

    # to-html
    html_p = sub.add_parser("to-html", help="Convert a wikitext file to HTML")
    html_p.add_argument("title", help="Page title used as parsing context")
    html_p.add_argument("file", type=Path, help="Wikitext file")
    html_p.add_argument("--body-only", action="store_true", help="Return only <body>")

    # save
    save_p = sub.add_parser("save", help="Save an edited HTML document")
    save_p.add_argument("file", type=Path, help="Edited HTML document")
    save_p.add_argument("--title", required=True, help="Page title")
    save_p.add_argument("--etag", help="ETag the HTML was loaded with")
    save_p.add_argument("--oldid", type=int, help="Base revision id")
    save_p.add_argument("--summary", default="", help="Edit summary")
    save_p.add_argument("--cache-key", help="Cache key of HTML stashed on the server")

    return parser


def _handler(user: str) -> ApiParsoidHandler:
    from visualedit.api import ApiParsoidHandler
    from visualedit.parsoid import Authority, Language, ParsoidClientFactory

    wiki = get_settings().wiki
    client = ParsoidClientFactory().create_parsoid_client(Authority(user_name=user))
    return ApiParsoidHandler(
        client,
        Language(wiki.content_language),
        collab_pad_page=wiki.collab_pad_page,
    )


class _RequestedRevisions:
    """Revision lookup for the CLI, which has no revision storage.

    Ids are taken as given and the latest revision is left to Parsoid.
    """

    def __init__(self, page: PageIdentity) -> None:
        self._page = page

    def get_revision_by_title(self, page: PageIdentity) -> RevisionRecord:
        return RevisionRecord(page=page, rev_id=0)

    def get_revision_by_id(self, rev_id: int) -> RevisionRecord:
        return RevisionRecord(page=self._page, rev_id=rev_id)


def _cmd_fetch(args: argparse.Namespace) -> None:
    from visualedit.revisions import get_valid_revision

    handler = _handler(args.user)
    page = PageIdentity(args.title)
    revision = get_valid_revision(_RequestedRevisions(page), page, args.oldid)
    response = handler.request_page_html(revision)

    lines = [f"ETag: {response.etag or '(none)'}", *handler.response_headers]
    console.print(Panel("\n".join(lines), title=args.title, border_style="blue"))
    if args.output:
        args.output.write_text(response.body, encoding="utf-8")
        console.print(f"[green]Wrote[/] {args.output}")
    else:
        console.print(response.body, markup=False, highlight=False, soft_wrap=True)


def _cmd_to_html(args: argparse.Namespace) -> None:
    handler = _handler(args.user)
    wikitext = args.file.read_text(encoding="utf-8")
    response = handler.transform_wikitext(
        PageIdentity(args.title), wikitext, args.body_only
    )
    console.print(response.body, markup=False, highlight=False, soft_wrap=True)


async def _save(args: argparse.Namespace) -> dict[str, Any]:
    from visualedit.saver import (
        ActionApiClient,
        SaveOptions,
        TargetSaver,
        parse_document,
    )

    settings = get_settings()
    doc = parse_document(args.file.read_text(encoding="utf-8"))
    extra_data = {
        "page": args.title,
        "etag": args.etag,
        "oldid": args.oldid,
        "summary": args.summary,
    }
    options = SaveOptions(
        on_cache_key_fail=lambda: console.print(
            "[yellow]Cache key expired, resending full content[/]"
        )
    )

    async with ActionApiClient(settings.wiki.api_url) as api:
        saver = TargetSaver(
            api,
            user_language=settings.wiki.user_language,
            action=settings.editor.action,
            deflate_level=settings.editor.deflate_level,
        )
        if args.cache_key:
            html = saver.deflate_doc(doc)
            return await saver.post_html(html, args.cache_key, extra_data, options)
        return await saver.save_doc(doc, extra_data, options)


def _cmd_save(args: argparse.Namespace) -> None:
    result = asyncio.run(_save(args))
    console.print(Panel(f"Saved {args.title}", border_style="green"))
    if "newrevid" in result:
        console.print(f"New revision: {result['newrevid']}")


_COMMANDS = {
    "fetch": _cmd_fetch,
    "to-html": _cmd_to_html,
    "save": _cmd_save,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)
    _setup_logging()

    try:
        _COMMANDS[args.command](args)
    except ApiUsageError as e:
        params = ", ".join(str(p) for p in e.params)
        console.print(f"[red]Error:[/] {e.code} ({e.message_key}) {params}".rstrip())
        sys.exit(1)
    except NoErrorNoSuccessError:
        console.print("[yellow]The wiki requires additional verification to save.[/]")
        sys.exit(2)
    except ActionApiError as e:
        console.print(f"[red]Save failed:[/] {e.code}")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
