import asyncio
from contextlib import asynccontextmanager
import importlib
import logging

import aiohttp
import typer
from tabulate import tabulate

from gatekeeper.context import ContextCache
from gatekeeper.errors import GatekeeperError
from gatekeeper.github import fetch_changed_files, fetch_config, get_reviews
from gatekeeper.logger import configure_logging
from gatekeeper.metric import push_metrics, run_error_count
from gatekeeper.runner import ApprovalEvaluator, run_approvals

logger = logging.getLogger("gatekeeper")

app = typer.Typer()


@app.callback()
def init():
    configure_logging()


@asynccontextmanager
async def context_cache():
    async with aiohttp.ClientSession() as session:
        try:
            yield ContextCache.for_session(session)
        except Exception:
            run_error_count.inc()
            raise
        finally:
            push_metrics()


def execute(handle):
    try:
        asyncio.run(handle())
    except GatekeeperError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)


def load_evaluator(path: str) -> ApprovalEvaluator:
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter(
            f"expected 'module:attribute', got {path!r}", param_hint="--evaluator"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(
            f"cannot import module {module_name!r}: {e}", param_hint="--evaluator"
        ) from e
    try:
        return getattr(module, attr)
    except AttributeError:
        raise typer.BadParameter(
            f"module {module_name!r} has no attribute {attr!r}",
            param_hint="--evaluator",
        ) from None


@app.command()
def files():
    """Print the files changed by the pull request."""

    async def handle():
        async with context_cache() as ctx:
            for filename in await fetch_changed_files(ctx):
                typer.echo(filename)

    execute(handle)


@app.command()
def reviews():
    """Print the reviews submitted on the pull request."""

    async def handle():
        async with context_cache() as ctx:
            rows = [
                (
                    review.id,
                    review.user.login if review.user is not None else "",
                    review.state,
                    review.submitted_at or "",
                )
                for review in await get_reviews(ctx)
            ]
        typer.echo(
            tabulate(rows, headers=("Id", "User", "State", "Submitted"), tablefmt="github")
        )

    execute(handle)


@app.command("config")
def show_config():
    """Print the approval groups defined in the config file."""

    async def handle():
        async with context_cache() as ctx:
            groups = await fetch_config(ctx)
        for group_name in groups:
            typer.echo(group_name)

    execute(handle)


@app.command()
def run(
    evaluator: str = typer.Option(
        ..., help="Approval evaluator to use, as 'module:attribute'"
    )
):
    """Open and resolve one check run per approval group."""
    evaluate = load_evaluator(evaluator)

    async def handle():
        async with context_cache() as ctx:
            results = await run_approvals(ctx, evaluate)
        rows = [
            (name, check_run.conclusion, check_run.html_url or "")
            for name, check_run in results.items()
        ]
        typer.echo(
            tabulate(rows, headers=("Group", "Conclusion", "URL"), tablefmt="github")
        )

    execute(handle)
