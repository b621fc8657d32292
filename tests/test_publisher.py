"""Tests for publishing generated documents."""

import asyncio
import json

from aiohttp import test_utils, web

from config import Config
from generators.narrative import generate_full
from publisher import append_index, document_slug, publish, save_document, send_webhook


class TestSaveDocument:
    def test_writes_front_matter_and_body(self, tmp_path, full_report):
        doc = generate_full(full_report)
        path = asyncio.run(save_document(doc, tmp_path / "out"))

        assert path.name == "chronicle-progress-update-thursday-november-20-2025.md"
        text = path.read_text(encoding="utf-8")
        assert text.startswith("<!--\ntitle: Chronicle: Progress Update - Thursday, November 20, 2025\n")
        assert text.endswith(doc.body)

    def test_explicit_slug(self, tmp_path, full_report):
        path = asyncio.run(save_document(generate_full(full_report), tmp_path, slug="custom"))
        assert path.name == "custom.md"

    def test_unwritable_returns_none(self, tmp_path, full_report):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert asyncio.run(save_document(generate_full(full_report), blocker / "sub")) is None

    def test_slug_truncated_at_word_boundary(self, full_report):
        slug = document_slug(generate_full(full_report), max_length=30)
        assert len(slug) <= 30
        assert not slug.endswith("-")
        assert slug == "chronicle-progress-update"


class TestAppendIndex:
    def test_appends_jsonl(self, tmp_path, full_report):
        doc = generate_full(full_report)
        index = tmp_path / "index" / "posts.jsonl"

        assert asyncio.run(append_index(doc, str(index)))
        assert asyncio.run(append_index(doc, str(index)))

        lines = index.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        record = json.loads(lines[0])
        assert record["title"] == doc.title
        assert record["projects"] == ["Chronicle"]
        assert record["file"] is None

    def test_disabled_without_path(self, full_report):
        assert asyncio.run(append_index(generate_full(full_report), ""))


class TestWebhook:
    def test_no_url_is_success(self, full_report):
        assert asyncio.run(send_webhook(generate_full(full_report), ""))

    def test_posts_payload(self, full_report):
        received = []

        async def hook(request):
            received.append(await request.json())
            status = 200 if request.path == "/ok" else 500
            return web.json_response({}, status=status)

        async def run():
            app = web.Application()
            app.router.add_post("/{name}", hook)
            async with test_utils.TestServer(app) as server:
                doc = generate_full(full_report)
                ok = await send_webhook(doc, str(server.make_url("/ok")))
                failed = await send_webhook(doc, str(server.make_url("/fail")))
                return ok, failed

        ok, failed = asyncio.run(run())

        assert ok is True
        assert failed is False
        assert received[0]["type"] == "generated_document"
        assert received[0]["title"].startswith("Chronicle")

    def test_unreachable_is_failure(self, full_report):
        doc = generate_full(full_report)
        assert asyncio.run(send_webhook(doc, "http://127.0.0.1:9/hook", timeout=2)) is False


class TestPublish:
    def test_saves_and_indexes(self, tmp_path, full_report):
        config = Config(output_dir=tmp_path / "generated", index_file=str(tmp_path / "index.jsonl"))
        result = asyncio.run(publish(generate_full(full_report), config, slug="post"))

        assert result.ok
        assert result.path == tmp_path / "generated" / "post.md"
        record = json.loads((tmp_path / "index.jsonl").read_text(encoding="utf-8"))
        assert record["file"] == str(result.path)
