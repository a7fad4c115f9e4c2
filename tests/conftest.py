"""Pytest configuration and fixtures."""

import io
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from handle_generator.config import ConversionOptions
from handle_generator.record_transformer import RecordTransformer


PREFIX = "20.500.12345"

EXPORT_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<rss version="2.0" xmlns:wp="http://wordpress.org/export/1.2/" '
    'xmlns:content="http://purl.org/rss/1.0/modules/content/">\n'
    '<channel>\n'
    '<title>Sistedes</title>\n'
)
EXPORT_FOOTER = '</channel>\n</rss>\n'


def export_item(link: Optional[str] = "http://x/1",
                guid: Optional[str] = "http://x/g1",
                meta: Optional[List[Tuple[str, str]]] = None,
                handle: Optional[str] = "123") -> str:
    """Build one WordPress export ``<item>``."""
    parts = ["<item>", "<title>Post</title>"]
    if link is not None:
        parts.append(f"<link>{link}</link>")
    if guid is not None:
        parts.append(f'<guid isPermaLink="false">{guid}</guid>')
    entries = list(meta or [])
    if handle is not None:
        entries.append(("handle", handle))
    for key, value in entries:
        parts.append(
            f"<wp:postmeta><wp:meta_key><![CDATA[{key}]]></wp:meta_key>"
            f"<wp:meta_value><![CDATA[{value}]]></wp:meta_value></wp:postmeta>"
        )
    parts.append("</item>")
    return "\n".join(parts) + "\n"


def export_document(*items: str) -> bytes:
    """Wrap items into a complete export."""
    return (EXPORT_HEADER + "".join(items) + EXPORT_FOOTER).encode("utf-8")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_export():
    """Export with two handle items, one plain post and one without guid."""
    return export_document(
        export_item(link="http://x/1", guid="http://x/g1", handle="123"),
        export_item(link="http://x/2", guid="http://x/g2", handle=None,
                    meta=[("_edit_last", "1")]),
        export_item(link="http://x/3", guid=None, handle="124"),
        export_item(link="http://x/4", guid="http://x/g4", handle="999"),
    )


@pytest.fixture
def run():
    """Run a transform and return the decoded output."""
    def _run(document: bytes, **options) -> str:
        options.setdefault("prefix", PREFIX)
        transformer = RecordTransformer(ConversionOptions(**options), enable_profiling=False)
        output = io.BytesIO()
        transformer.transform(io.BytesIO(document), output)
        return output.getvalue().decode("utf-8")
    return _run
