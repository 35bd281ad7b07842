#!/usr/bin/env python3
"""SubScout - CLI Entry Point.

Find your users' pain points on Reddit.
"""

import json
from dataclasses import replace

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from subscout.analysis import classify, get_title_normalizer, post_text, scan_subreddit
from subscout.config import configure_logging, get_config, reload_config
from subscout.database import get_database
from subscout.reddit_client import get_reddit_client


console = Console()


@click.group()
@click.version_option(version="0.1.0", prog_name="subscout")
@click.option("--config", "-c", "config_path", default=None, type=click.Path(exists=True), help="Config file (defaults to config/local.yaml or config/default.yaml)")
def cli(config_path: str | None):
    """SubScout - Find your users' pain points on Reddit."""
    if config_path:
        reload_config(config_path)
    configure_logging()


@cli.command()
def init():
    """Initialize SubScout (create the database)."""
    console.print("[bold]Initializing SubScout...[/bold]\n")

    config = get_config()

    db = get_database()
    db.initialize()
    console.print(f"[green]✓[/green] Initialized database: {config.database.path}")

    if config.reddit.is_valid():
        console.print("[green]✓[/green] Reddit credentials configured")
    else:
        console.print("[yellow]![/yellow] Reddit credentials not set (set REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET)")

    for provider in (config.llm.analysis_provider, config.llm.discovery_provider):
        if config.llm_credentials.has_key_for_provider(provider):
            console.print(f"[green]✓[/green] LLM credentials configured ({provider})")
        else:
            console.print(f"[yellow]![/yellow] LLM credentials not set for {provider}")

    console.print("\n[bold green]Initialization complete![/bold green]")


@cli.command()
def check():
    """Check configuration and credentials."""
    console.print("\n[bold]Configuration Check[/bold]\n")

    config = get_config()

    if config.reddit.is_valid():
        console.print("[green]✓[/green] Reddit credentials: Configured")
        try:
            reddit = get_reddit_client()
            reddit.verify_connection()
            console.print("[green]✓[/green] Reddit connection: Working")
        except Exception as e:
            console.print(f"[red]✗[/red] Reddit connection: {e}")
    else:
        console.print("[red]✗[/red] Reddit credentials: Not configured")

    for role, provider in (
        ("Analysis", config.llm.analysis_provider),
        ("Discovery", config.llm.discovery_provider),
    ):
        if config.llm_credentials.has_key_for_provider(provider):
            console.print(f"[green]✓[/green] {role} LLM ({provider}): Configured")
        else:
            console.print(f"[red]✗[/red] {role} LLM ({provider}): Not configured")

    if config.auth.is_valid():
        console.print("[green]✓[/green] Supabase JWT secret: Configured")
    else:
        console.print("[red]✗[/red] Supabase JWT secret: Not configured")

    try:
        db = get_database()
        db.initialize()
        console.print(f"[green]✓[/green] Database: {config.database.path}")
    except Exception as e:
        console.print(f"[red]✗[/red] Database: {e}")

    console.print(f"\n[bold]Current Settings:[/bold]")
    console.print(f"  Analysis LLM: {config.llm.analysis_provider}/{config.llm.analysis_model}")
    console.print(f"  Discovery LLM: {config.llm.discovery_provider}/{config.llm.discovery_model}")
    console.print(f"  Hot posts per scan: {config.scan.hot_posts_limit}")
    console.print(f"  Insights per category: {config.scan.max_insights_per_category}")


@cli.command()
def stats():
    """Show database statistics."""
    db = get_database()
    db.initialize()

    console.print("\n[bold]Database Statistics[/bold]\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Table", style="cyan")
    table.add_column("Records", justify="right")

    for table_name, count in db.get_stats().items():
        table.add_row(table_name, str(count))

    console.print(table)


@cli.command(name="classify")
@click.argument("text")
def classify_text(text: str):
    """Classify a piece of text as pain point and/or feature request."""
    result = classify(post_text(text, None))

    def mark(flag: bool) -> str:
        return "[green]yes[/green]" if flag else "[dim]no[/dim]"

    console.print(f"Pain point:      {mark(result.is_pain_point)}")
    console.print(f"Feature request: {mark(result.is_feature_request)}")


@cli.command()
@click.argument("subreddit")
@click.option("--limit", "-l", default=None, type=int, help="Hot posts to fetch")
@click.option("--json", "as_json", is_flag=True, help="Print the scan result as JSON")
def scan(subreddit: str, limit: int | None, as_json: bool):
    """Scan a subreddit's hot posts without storing anything."""
    settings = get_config().scan
    if limit is not None:
        settings = replace(settings, hot_posts_limit=limit)

    name = subreddit.removeprefix("r/")

    if as_json:
        click.echo(json.dumps(scan_subreddit(name, settings=settings).to_dict(), indent=2))
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Scanning r/{name}...", total=None)
        result = scan_subreddit(name, settings=settings)

    if not result.posts:
        console.print(f"[yellow]No posts fetched from r/{name}[/yellow]")
        return

    for heading, titles in (
        ("Pain Points", result.pain_points),
        ("Feature Requests", result.feature_requests),
    ):
        console.print(f"\n[bold]{heading}[/bold] ({len(titles)})")
        for title in titles:
            console.print(f"  • {title}")

    if result.common_topics:
        console.print(f"\n[bold]Common Topics:[/bold] {', '.join(result.common_topics)}")


@cli.command(name="pain-points")
@click.option("--user", "-u", required=True, help="User ID")
@click.option("--limit", "-l", default=10, type=int, help="Number of groups to show")
def pain_points(user: str, limit: int):
    """Show a user's most frequent pain points."""
    config = get_config()
    db = get_database()
    db.initialize()

    normalizer = get_title_normalizer(config.scan.title_normalizer)
    groups = db.get_top_pain_points(user, limit=limit, normalizer=normalizer)

    if not groups:
        console.print("[yellow]No pain points recorded yet[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Count", justify="right", style="cyan")
    table.add_column("Title")

    for group in groups:
        table.add_row(str(group["count"]), group["title"])

    console.print(table)


@cli.command()
@click.option("--user", "-u", required=True, help="User ID")
@click.option("--limit", "-l", default=10, type=int, help="Number of tags to show")
def trends(user: str, limit: int):
    """Show tags trending across a user's most recent insights."""
    config = get_config()
    db = get_database()
    db.initialize()

    topics = db.get_trending_topics(user, limit=limit, window=config.scan.trending_window)

    if not topics:
        console.print("[yellow]No tagged insights in the trending window[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Tag", style="cyan")
    table.add_column("Count", justify="right")

    for topic in topics:
        table.add_row(topic["tag"], str(topic["count"]))

    console.print(table)


@cli.command()
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to listen on")
@click.option("--reload", "-r", is_flag=True, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, reload: bool):
    """Launch the API server."""
    import uvicorn

    config = get_config()
    host = host or config.server.host
    port = port or config.server.port

    console.print(f"\n[bold]Starting SubScout API[/bold]\n")
    console.print(f"  URL: [cyan]http://{host}:{port}[/cyan]")
    console.print(f"  Reload: {'enabled' if reload else 'disabled'}")
    console.print("\n[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "subscout.ui.web:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    cli()
