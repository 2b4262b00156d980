from __future__ import annotations

import json

import pytest
from telegram.ext import Application
from typer.testing import CliRunner

from conftest import make_page, search_body
from wikiukbot.cli import app, serve

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_env(monkeypatch, tmp_path):
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TELEGRAM_TOKEN", raising=False)
    monkeypatch.delenv("WEBHOOK_URL", raising=False)
    monkeypatch.delenv("VERCEL_PROJECT_PRODUCTION_URL", raising=False)
    monkeypatch.delenv("WEBHOOK_SECRET_TOKEN", raising=False)
    monkeypatch.delenv("DROP_PENDING_UPDATES", raising=False)
    monkeypatch.delenv("PORT", raising=False)


def test_search_json(wiki_api):
    wiki_api(search_body(make_page(2, "Київстар", 1), make_page(1, "Київ", 0)))
    result = runner.invoke(app, ["search", "Київ", "--json"])
    assert result.exit_code == 0, result.output
    assert [r["page_id"] for r in json.loads(result.output)] == [1, 2]


def test_search_no_results(wiki_api):
    wiki_api({"batchcomplete": True})
    result = runner.invoke(app, ["search", "zzzz"])
    assert result.exit_code == 0
    assert "No results" in result.output


def test_search_upstream_error(wiki_api):
    wiki_api(status_code=503)
    result = runner.invoke(app, ["search", "Київ"])
    assert result.exit_code == 1
    assert "503" in result.output


def test_random(wiki_api):
    wiki_api({"query": {"random": [{"id": 1, "ns": 0, "title": "Крим"}]}})
    result = runner.invoke(app, ["random"])
    assert result.exit_code == 0
    assert "Крим" in result.output


def test_random_rejects_unknown_strategy():
    result = runner.invoke(app, ["random", "--strategy", "guess"])
    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)


def test_answer_for_empty_query(wiki_api):
    wiki_api({"query": {"random": [{"id": 1, "ns": 0, "title": "Крим"}]}})
    result = runner.invoke(app, ["answer", ""])
    assert result.exit_code == 0, result.output
    assert '"cache_time": 0' in result.output
    assert '"share_text": "Крим"' in result.output


def test_bot_run_requires_token():
    result = runner.invoke(app, ["bot", "run"])
    assert result.exit_code == 3


def test_set_webhook_requires_url(monkeypatch):
    monkeypatch.setenv("TELEGRAM_TOKEN", "123:abc")
    # a Vercel deployment URL is not served by this bot
    monkeypatch.setenv("VERCEL_PROJECT_PRODUCTION_URL", "wikiuk.vercel.app")
    monkeypatch.setattr(serve, "register_webhook", _fail_if_called)
    result = runner.invoke(app, ["bot", "set-webhook"])
    assert result.exit_code == 3
    assert "WEBHOOK_URL" in result.output


async def _fail_if_called(*args, **kwargs):
    raise AssertionError("webhook must not be registered")


@pytest.fixture
def runners(monkeypatch):
    monkeypatch.setenv("TELEGRAM_TOKEN", "123:abc")
    calls: dict[str, dict] = {}
    monkeypatch.setattr(
        Application, "run_polling", lambda self, **kwargs: calls.setdefault("polling", kwargs)
    )
    monkeypatch.setattr(
        Application, "run_webhook", lambda self, **kwargs: calls.setdefault("webhook", kwargs)
    )
    return calls


def test_search_rejects_blank_query(wiki_api):
    m = wiki_api(search_body())
    result = runner.invoke(app, ["search", "   "])
    assert result.exit_code == 2
    assert m.call_count == 0


def test_bot_run_polls_without_webhook_url(runners, monkeypatch):
    monkeypatch.setenv("DROP_PENDING_UPDATES", "1")
    result = runner.invoke(app, ["bot", "run"])
    assert result.exit_code == 0, result.output
    assert list(runners) == ["polling"]
    assert runners["polling"]["drop_pending_updates"] is True


def test_bot_run_serves_webhook_url(runners, monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "https://bot.example.com/tg/hook")
    monkeypatch.setenv("WEBHOOK_SECRET_TOKEN", "s3cret")
    monkeypatch.setenv("PORT", "9000")
    result = runner.invoke(app, ["bot", "run"])
    assert result.exit_code == 0, result.output
    assert list(runners) == ["webhook"]

    kwargs = runners["webhook"]
    assert kwargs["url_path"] == "tg/hook"
    assert kwargs["webhook_url"] == "https://bot.example.com/tg/hook"
    assert kwargs["secret_token"] == "s3cret"
    assert kwargs["port"] == 9000
    assert kwargs["listen"] == "0.0.0.0"
    assert kwargs["drop_pending_updates"] is False


def test_bot_run_rejects_unknown_strategy(runners):
    result = runner.invoke(app, ["bot", "run", "--strategy", "guess"])
    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)
    assert runners == {}


def test_set_webhook_registers_webhook_url(monkeypatch):
    monkeypatch.setenv("TELEGRAM_TOKEN", "123:abc")
    monkeypatch.setenv("WEBHOOK_URL", "https://bot.example.com/tg/hook")
    monkeypatch.setenv("WEBHOOK_SECRET_TOKEN", "s3cret")
    registered: list[tuple] = []

    class FakeBot:
        def __init__(self, token):
            self.token = token

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

    async def fake_register(bot, url, **kwargs):
        registered.append((bot.token, url, kwargs))

    monkeypatch.setattr(serve, "Bot", FakeBot)
    monkeypatch.setattr(serve, "register_webhook", fake_register)

    result = runner.invoke(app, ["bot", "set-webhook"])
    assert result.exit_code == 0, result.output
    assert registered == [
        (
            "123:abc",
            "https://bot.example.com/tg/hook",
            {"secret_token": "s3cret", "drop_pending_updates": False},
        )
    ]
