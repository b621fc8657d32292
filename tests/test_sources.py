"""Tests for local and GitHub document sources."""

import asyncio
import base64
import os
import time
from datetime import datetime, timedelta, timezone

import pytest
from aiohttp import web
from aiohttp import test_utils

from errors import AccessDenied, DocumentNotFound
from sources.github import GitHubFetcher, parse_github_url
from sources.local import DirectoryLogSource, LocalDocumentFetcher, ProgressDirectory


class TestParseGithubUrl:
    @pytest.mark.parametrize("url", [
        "https://github.com/acme/site",
        "https://github.com/acme/site.git",
        "https://github.com/acme/site/",
        "git@github.com:acme/site.git",
        "acme/site",
    ])
    def test_supported_forms(self, url):
        assert parse_github_url(url) == ("acme", "site")

    @pytest.mark.parametrize("url", ["", "site", "https://example.com", "a b/c"])
    def test_unrecognized(self, url):
        assert parse_github_url(url) is None


class TestDirectoryLogSource:
    def test_reads_recent_markdown(self, tmp_path):
        (tmp_path / "2025-11-20.md").write_text("- Fixed it", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("- Fixed it", encoding="utf-8")

        docs = DirectoryLogSource(tmp_path).list_recent_documents(7)

        assert [d.name for d in docs] == ["2025-11-20.md"]
        assert docs[0].raw_text == "- Fixed it"
        assert docs[0].modified_at.tzinfo is not None

    def test_skips_stale_files(self, tmp_path):
        old = tmp_path / "2025-01-01.md"
        old.write_text("- Fixed it", encoding="utf-8")
        stale = time.time() - 30 * 86400
        os.utime(old, (stale, stale))
        (tmp_path / "2025-11-20.md").write_text("- Shipped", encoding="utf-8")

        docs = DirectoryLogSource(tmp_path).list_recent_documents(7)

        assert [d.name for d in docs] == ["2025-11-20.md"]

    def test_skips_unreadable_files(self, tmp_path):
        (tmp_path / "bad.md").write_bytes(b"\xff\xfe\xfa not utf-8")
        (tmp_path / "good.md").write_text("- Shipped", encoding="utf-8")

        docs = DirectoryLogSource(tmp_path).list_recent_documents(7)

        assert [d.name for d in docs] == ["good.md"]

    def test_missing_directory(self, tmp_path):
        assert DirectoryLogSource(tmp_path / "nope").list_recent_documents(7) == []

    def test_reference_instant(self, tmp_path):
        (tmp_path / "a.md").write_text("- Shipped", encoding="utf-8")
        future = datetime.now(timezone.utc) + timedelta(days=30)
        assert DirectoryLogSource(tmp_path).list_recent_documents(7, now=future) == []


class TestProgressDirectory:
    @pytest.mark.parametrize("path", ["../secret.md", "/etc/passwd.md", "notes.txt", "a/../../b.md"])
    def test_rejects_unsafe_paths(self, tmp_path, path):
        with pytest.raises(ValueError):
            ProgressDirectory(tmp_path).resolve(path)

    def test_read_missing(self, tmp_path):
        with pytest.raises(DocumentNotFound):
            ProgressDirectory(tmp_path).read("missing.md")

    def test_read_nested(self, tmp_path):
        (tmp_path / "site").mkdir()
        (tmp_path / "site" / "2025-11-20.md").write_text("## Done\n- x", encoding="utf-8")
        doc = ProgressDirectory(tmp_path).read("site/2025-11-20.md")
        assert doc.name == "2025-11-20.md"

    def test_list_files_newest_first(self, tmp_path, sample_report_text):
        (tmp_path / "2025-11-18.md").write_text("## Done\n- a", encoding="utf-8")
        (tmp_path / "2025-11-20.md").write_text(sample_report_text, encoding="utf-8")
        (tmp_path / "ideas.md").write_text("# Ideas", encoding="utf-8")

        files = ProgressDirectory(tmp_path).list_files()

        assert [f.name for f in files] == ["2025-11-20.md", "2025-11-18.md", "ideas.md"]
        newest = files[0]
        assert newest.project_name == "Chronicle"
        assert (newest.task_count, newest.issue_count) == (2, 2)
        assert newest.size > 0
        assert files[2].date is None

    def test_list_missing_directory(self, tmp_path):
        assert ProgressDirectory(tmp_path / "nope").list_files() == []


class TestLocalDocumentFetcher:
    def test_fetch_and_list(self, tmp_path):
        (tmp_path / "progress").mkdir()
        (tmp_path / "progress" / "2025-11-20.md").write_text("hello", encoding="utf-8")
        fetcher = LocalDocumentFetcher(tmp_path)

        entries = asyncio.run(fetcher.list_directory("progress"))
        assert [(e.name, e.path, e.kind) for e in entries] == [
            ("2025-11-20.md", "progress/2025-11-20.md", "file"),
        ]
        assert asyncio.run(fetcher.fetch_file("progress/2025-11-20.md")) == "hello"

    def test_missing(self, tmp_path):
        fetcher = LocalDocumentFetcher(tmp_path)
        assert asyncio.run(fetcher.list_directory("progress")) == []
        with pytest.raises(DocumentNotFound):
            asyncio.run(fetcher.fetch_file("progress/nope.md"))

    def test_traversal_rejected(self, tmp_path):
        with pytest.raises(DocumentNotFound):
            asyncio.run(LocalDocumentFetcher(tmp_path).fetch_file("../etc/passwd"))


def _contents_app() -> web.Application:
    """Minimal stand-in for the GitHub contents API."""

    async def contents(request: web.Request) -> web.Response:
        path = request.match_info["path"]
        if request.match_info["repo"] == "private":
            if request.headers.get("Authorization") != "Bearer good":
                return web.json_response({"message": "Bad credentials"}, status=401)
        if request.match_info["repo"] == "limited":
            return web.json_response({}, status=403, headers={"x-ratelimit-remaining": "0"})
        if request.match_info["repo"] == "forbidden":
            return web.json_response({}, status=403)
        if path == "progress":
            return web.json_response([
                {"name": "2025-11-20.md", "path": "progress/2025-11-20.md", "type": "file"},
                {"name": "archive", "path": "progress/archive", "type": "dir"},
            ])
        if path == "progress/2025-11-20.md":
            encoded = base64.b64encode("## Done\n- Shipped ✓".encode()).decode()
            return web.json_response({"type": "file", "content": encoded, "encoding": "base64"})
        return web.json_response({"message": "Not Found"}, status=404)

    app = web.Application()
    app.router.add_get("/repos/{owner}/{repo}/contents/{path:.*}", contents)
    return app


def _with_server(check):
    async def run():
        async with test_utils.TestServer(_contents_app()) as server:
            return await check(str(server.make_url("/")))

    return asyncio.run(run())


class TestGitHubFetcher:
    def test_fetch_file_decodes_base64(self):
        async def check(api_url):
            return await GitHubFetcher("acme", "site", api_url=api_url).fetch_file("progress/2025-11-20.md")

        assert _with_server(check) == "## Done\n- Shipped ✓"

    def test_list_directory(self):
        async def check(api_url):
            return await GitHubFetcher("acme", "site", api_url=api_url).list_directory("progress")

        entries = _with_server(check)
        assert [(e.name, e.kind) for e in entries] == [("2025-11-20.md", "file"), ("archive", "dir")]

    def test_missing_file_not_found(self):
        async def check(api_url):
            with pytest.raises(DocumentNotFound) as exc:
                await GitHubFetcher("acme", "site", api_url=api_url).fetch_file("progress/nope.md")
            return exc.value.status

        assert _with_server(check) == 404

    def test_missing_directory_lists_empty(self):
        async def check(api_url):
            return await GitHubFetcher("acme", "site", api_url=api_url).list_directory("nope")

        assert _with_server(check) == []

    def test_directory_is_not_a_file(self):
        async def check(api_url):
            with pytest.raises(DocumentNotFound):
                await GitHubFetcher("acme", "site", api_url=api_url).fetch_file("progress")

        _with_server(check)

    def test_bad_token_access_denied(self):
        async def check(api_url):
            with pytest.raises(AccessDenied):
                await GitHubFetcher("acme", "private", "wrong", api_url=api_url).fetch_file("progress")
            with pytest.raises(AccessDenied):
                await GitHubFetcher("acme", "forbidden", api_url=api_url).list_directory("progress")
            return await GitHubFetcher("acme", "private", "good", api_url=api_url).list_directory("progress")

        assert len(_with_server(check)) == 2

    def test_rate_limit_is_not_found(self):
        async def check(api_url):
            with pytest.raises(DocumentNotFound) as exc:
                await GitHubFetcher("acme", "limited", api_url=api_url).fetch_file("x.md")
            return exc.value.status

        assert _with_server(check) == 403

    def test_transport_error_is_not_found(self):
        async def check():
            fetcher = GitHubFetcher("acme", "site", api_url="http://127.0.0.1:9", timeout=2)
            with pytest.raises(DocumentNotFound):
                await fetcher.fetch_file("progress/2025-11-20.md")

        asyncio.run(check())
