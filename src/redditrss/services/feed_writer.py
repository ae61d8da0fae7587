from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from email.utils import format_datetime

from redditrss.models import Feed

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"

ET.register_namespace("content", CONTENT_NS)

# Anything XML 1.0 does not allow in character data.
INVALID_XML_CHARS = re.compile("[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def xml_safe(value: str | None) -> str:
    return INVALID_XML_CHARS.sub("", value or "")


def _text(
    parent: ET.Element,
    tag: str,
    value: str | None,
    attrib: dict[str, str] | None = None,
    optional: bool = False,
) -> None:
    if optional and not value:
        return
    ET.SubElement(parent, tag, attrib or {}).text = xml_safe(value)


def render_rss(feed: Feed, now: datetime | None = None) -> bytes:
    """Serialize a feed as an RSS 2.0 document with content:encoded item bodies."""
    now = now or datetime.now(UTC)

    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    _text(channel, "title", feed.title)
    _text(channel, "link", feed.link)
    _text(channel, "description", feed.description)
    _text(channel, "lastBuildDate", format_datetime(now))

    if feed.image is not None:
        image = ET.SubElement(channel, "image")
        _text(image, "url", feed.image.url)
        _text(image, "title", feed.image.title)
        _text(image, "link", feed.image.link)

    for item in feed.items:
        entry = ET.SubElement(channel, "item")
        _text(entry, "title", item.title)
        _text(entry, "link", item.link)
        _text(entry, "description", item.description, optional=True)
        _text(entry, "author", item.author, optional=True)
        _text(entry, "guid", item.id, {"isPermaLink": "false"})
        _text(entry, "pubDate", format_datetime(item.created))
        _text(entry, f"{{{CONTENT_NS}}}encoded", item.content, optional=True)

    return ET.tostring(rss, encoding="utf-8", xml_declaration=True)
