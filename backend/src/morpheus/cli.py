"""
morpheus: command-line client for the Morpheus knowledge base

Usage:
    morpheus serve                      # Run the API server
    morpheus query "travel #design"     # Search notes and links
"""

import json
import re
import sys
from typing import Any

import click
import httpx

DEFAULT_URL = "http://localhost:8000"

_TAG_RE = re.compile(r"#(\w+)")


def split_query(text: str) -> tuple[str, list[str]]:
    """Split ``"query #tag1 #tag2"`` into the query text and tag names.

    When the text holds nothing but tags, the tag names become the query.
    """
    tags = _TAG_RE.findall(text)
    query = " ".join(_TAG_RE.sub("", text).split())
    if not query:
        query = " ".join(tags)
    return query, tags


def format_results(results: dict[str, Any]) -> str:
    """Render a query response for the terminal."""
    lines: list[str] = []

    notes = results.get("notes", [])
    if notes:
        lines.append("Notes:")
        for note in notes:
            lines.append("")
            lines.append(f"{note['title']}  ({note['relevanceScore']:.2f})")
            lines.append(note["content"])
            if note.get("tags"):
                lines.append(f"Tags: {', '.join(t['name'] for t in note['tags'])}")
        lines.append("")

    links = results.get("links", [])
    if links:
        lines.append("Links:")
        for link in links:
            lines.append("")
            lines.append(f"{link['title']}  ({link['relevanceScore']:.2f})")
            lines.append(link["url"])
            if link.get("description"):
                lines.append(link["description"])
            if link.get("tags"):
                lines.append(f"Tags: {', '.join(t['name'] for t in link['tags'])}")
        lines.append("")

    metadata = results.get("metadata")
    if metadata:
        lines.append(
            f"Summary: found {metadata['totalNotes']} notes and {metadata['totalLinks']} links"
        )
        if metadata.get("usedTags"):
            lines.append(f"Related tags: {', '.join(metadata['usedTags'])}")

    return "\n".join(lines)


@click.group()
def cli() -> None:
    """Morpheus knowledge base."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run("morpheus.main:app", host=host, port=port, reload=reload)


@cli.command()
@click.argument("text")
@click.option("--url", default=DEFAULT_URL, show_default=True, help="Server base URL")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Max results per list")
@click.option("--json", "as_json", is_flag=True, help="Output the raw JSON response")
def query(text: str, url: str, limit: int | None, as_json: bool) -> None:
    """Search notes and links.

    Words starting with # are sent as tag filters.

    \b
    Examples:
      morpheus query "travel app"
      morpheus query "color palette #design #colors"
      morpheus query "#travel" --limit=3 --json
    """
    clean_query, tags = split_query(text)
    if not clean_query:
        raise click.UsageError("Query text is empty")

    body: dict[str, Any] = {"query": clean_query, "tags": tags}
    if limit is not None:
        body["limit"] = limit

    try:
        response = httpx.post(f"{url.rstrip('/')}/api/mcp/query", json=body, timeout=30.0)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        click.echo(f"Error: server answered {e.response.status_code}: {e.response.text}", err=True)
        sys.exit(1)
    except httpx.HTTPError as e:
        click.echo(f"Error: could not reach {url}: {e}", err=True)
        sys.exit(1)

    results = response.json()

    if as_json:
        click.echo(json.dumps(results, indent=2))
    elif results.get("notes") or results.get("links"):
        click.echo(format_results(results))

    if not results.get("notes") and not results.get("links"):
        if not as_json:
            click.echo(f"No relevant knowledge found for query: {clean_query}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
