"""Publishing for generated documents.

This module handles all output for generated posts:
- Markdown files saved to the output directory
- JSONL index of everything generated
- Webhook POST notifications

Every method fails gracefully: errors are logged and reported as False
(or None), never raised, so one failed output does not block the others.

Output Formats:
    Markdown: Post body preceded by a metadata comment block
    JSONL: One JSON object per line (title, tags, excerpt, file path)
    Webhook: JSON payload with the full document
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiohttp

from config import Config
from generators.text import single_line, slugify
from models.narrative import GeneratedDocument

logger = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 60


@dataclass
class PublishResult:
    """Outcome of publishing one document."""

    path: Path | None = None
    indexed: bool = True
    webhook: bool = True

    @property
    def ok(self) -> bool:
        return self.path is not None and self.indexed and self.webhook


def document_slug(doc: GeneratedDocument, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Build a filename slug from a document title, cut at a word boundary."""
    slug = slugify(doc.title) or "post"
    if len(slug) > max_length:
        slug = slug[:max_length]
        last_dash = slug.rfind("-")
        if last_dash > max_length // 2:
            slug = slug[:last_dash]
    return slug.strip("-")


def _front_matter(doc: GeneratedDocument) -> str:
    fields = {
        "title": doc.title,
        "format": doc.format.value,
        "tags": ", ".join(doc.tags),
        "read_time": f"{doc.read_time} min",
        "excerpt": doc.excerpt,
    }
    lines = ["<!--"]
    lines.extend(f"{key}: {single_line(value)}" for key, value in fields.items())
    lines.append("-->")
    return "\n".join(lines)


async def save_document(
    doc: GeneratedDocument,
    output_dir: Path,
    slug: str | None = None,
) -> Path | None:
    """Save a generated document as markdown.

    Returns:
        Path written, or None on failure
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        filepath = output_dir / f"{slug or document_slug(doc)}.md"
        filepath.write_text(f"{_front_matter(doc)}\n\n{doc.body}", encoding="utf-8")
        logger.info("Document saved | file=%s", filepath.name)
        return filepath
    except OSError as e:
        logger.error("Document save failed | title=%s error=%s", doc.title[:40], e, exc_info=True)
        return None


async def append_index(doc: GeneratedDocument, filepath: str, saved_path: Path | None = None) -> bool:
    """Append an index record for a document to a JSONL file."""
    if not filepath:
        return True

    record: dict[str, Any] = {
        "timestamp": datetime.now().isoformat(),
        "title": doc.title,
        "format": doc.format.value,
        "tags": doc.tags,
        "excerpt": doc.excerpt,
        "read_time": doc.read_time,
        "projects": sorted({report.project_name for report in doc.source_reports}),
        "file": str(saved_path) if saved_path else None,
    }

    try:
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Warn if file is getting large (> 100MB)
        if path.exists():
            size_mb = path.stat().st_size / (1024 * 1024)
            if size_mb > 100:
                logger.warning("Index file large | size=%.1fMB path=%s", size_mb, filepath)

        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
        return True
    except OSError as e:
        logger.error("Index file error: %s (%s)", e, type(e).__name__, exc_info=True)
        return False


async def send_webhook(doc: GeneratedDocument, url: str, timeout: int = 10) -> bool:
    """POST a generated document to a webhook.

    Returns:
        True on 2xx or when no URL is configured, False otherwise
    """
    if not url:
        return True

    payload = {
        "type": "generated_document",
        "timestamp": datetime.now().isoformat(),
        "title": doc.title,
        "format": doc.format.value,
        "excerpt": doc.excerpt,
        "tags": doc.tags,
        "read_time": doc.read_time,
        "body": doc.body,
    }

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url, json=payload, timeout=aiohttp.ClientTimeout(total=timeout)
            ) as resp:
                if resp.status < 300:
                    logger.debug("Webhook sent | title=%s", doc.title[:40])
                    return True
                logger.warning("Webhook failed | status=%d title=%s", resp.status, doc.title[:40])
                return False
    except asyncio.TimeoutError:
        logger.warning("Webhook timeout | url=%s title=%s", url[:50], doc.title[:40])
        return False
    except aiohttp.ClientError as e:
        logger.error("Webhook error: %s (%s)", e, type(e).__name__, exc_info=True)
        return False


async def publish(doc: GeneratedDocument, config: Config, slug: str | None = None) -> PublishResult:
    """Save, index and announce a generated document."""
    path = await save_document(doc, config.output_dir, slug=slug)
    indexed, webhook = await asyncio.gather(
        append_index(doc, config.index_file, path),
        send_webhook(doc, config.webhook_url, timeout=config.request_timeout_seconds),
    )
    result = PublishResult(path=path, indexed=indexed, webhook=webhook)
    logger.info(
        "Document published | title=%s saved=%s indexed=%s webhook=%s",
        doc.title[:40], path is not None, indexed, webhook,
    )
    return result
