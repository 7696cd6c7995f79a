from contextlib import asynccontextmanager

from gidgethub import aiohttp as gh_aiohttp
import pytest
import typer
from typer.testing import CliRunner

from gatekeeper import cli
from gatekeeper.context import ContextCache
from gatekeeper.metric import run_error_count

from conftest import make_check_run, make_content, make_file, make_review

runner = CliRunner()

CONFIG = "teamA:\n  paths: ['src/**']\n"


async def approve_all(group_name, group, changed_files, reviews):
    return True


@pytest.fixture
def fake_context(monkeypatch, make_cache):
    @asynccontextmanager
    async def context_cache():
        yield make_cache()

    monkeypatch.setattr(cli, "context_cache", context_cache)


def test_load_evaluator():
    assert cli.load_evaluator("test_cli:approve_all") is approve_all


@pytest.mark.parametrize(
    "path",
    ["test_cli", "test_cli:", ":approve_all", "test_cli:nope", "no_such_module_xyz:evaluate"],
)
def test_load_evaluator_invalid(path):
    with pytest.raises(typer.BadParameter):
        cli.load_evaluator(path)


def test_files(gh, fake_context):
    gh.route_pages(
        "/repos/org/repo/pulls/7/files", [[make_file("a.py"), make_file("docs/b.md")]]
    )

    result = runner.invoke(cli.app, ["files"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines.index("a.py") < lines.index("docs/b.md")


def test_reviews(gh, fake_context):
    gh.route_pages(
        "/repos/org/repo/pulls/7/reviews", [[make_review(5, "carol", "COMMENTED")]]
    )

    result = runner.invoke(cli.app, ["reviews"])

    assert result.exit_code == 0, result.output
    assert "carol" in result.output
    assert "COMMENTED" in result.output


def test_config(gh, fake_context):
    gh.route("GET", "/repos/org/repo/contents/.github/approvals.yml", make_content(CONFIG))

    result = runner.invoke(cli.app, ["config"])

    assert result.exit_code == 0, result.output
    assert "teamA" in result.output.splitlines()


def test_config_missing_exits_with_error(gh, fake_context):
    result = runner.invoke(cli.app, ["config"])
    assert result.exit_code == 1


def test_run(gh, fake_context):
    gh.route("GET", "/repos/org/repo/contents/.github/approvals.yml", make_content(CONFIG))
    gh.route_pages("/repos/org/repo/pulls/7/files", [[make_file("src/a.py")]])
    gh.route_pages("/repos/org/repo/pulls/7/reviews", [[make_review(1)]])
    gh.route("POST", "/repos/org/repo/check-runs", make_check_run(31, "teamA"), status=201)
    gh.route(
        "PATCH",
        "/repos/org/repo/check-runs/31",
        make_check_run(31, "teamA", status="completed", conclusion="success"),
    )

    result = runner.invoke(cli.app, ["run", "--evaluator", "test_cli:approve_all"])

    assert result.exit_code == 0, result.output
    assert "teamA" in result.output
    assert "success" in result.output


@pytest.mark.asyncio
async def test_context_cache_builds_client_and_pushes_metrics(monkeypatch):
    pushes = []
    monkeypatch.setattr(cli, "push_metrics", lambda: pushes.append(True))
    monkeypatch.setenv("INPUT_TOKEN", "secret-token")
    before = run_error_count._value.get()

    async with cli.context_cache() as ctx:
        assert isinstance(ctx, ContextCache)
        assert isinstance(ctx.client.gh, gh_aiohttp.GitHubAPI)
        assert ctx.client.gh.oauth_token == "secret-token"
        assert pushes == []

    assert pushes == [True]
    assert run_error_count._value.get() == before


@pytest.mark.asyncio
async def test_context_cache_counts_failed_runs(monkeypatch):
    pushes = []
    monkeypatch.setattr(cli, "push_metrics", lambda: pushes.append(True))
    before = run_error_count._value.get()

    with pytest.raises(RuntimeError, match="boom"):
        async with cli.context_cache():
            raise RuntimeError("boom")

    assert run_error_count._value.get() == before + 1
    assert pushes == [True]
