"""
DOM extractor.

A small script walks the schedule container inside the rendered page and
returns a plain snapshot: for each list item its header text and, for each
image, the image attributes plus the texts of every ``div`` in the image's
surrounding container, in document order. The snapshot is then folded into
RawFragments here, so the matching rules are plain Python.
"""

import logging
import re
from typing import Any, Iterator, List, Optional

from mgo_events.config import EVENT_BOX_SELECTOR, EVENT_NAME_PREFIX
from mgo_events.core.interfaces import ContainerNotFoundError, RenderedPage, ScraperParseError
from mgo_events.core.models import RawFragment

logger = logging.getLogger("mgo_events.extractor")

HEADER_PATTERN = re.compile(r"Events for (.+)")
TIME_RANGE_PATTERN = re.compile(
    r"\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2} - \d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}"
)
DURATION_LABEL = "Duration:"

# Returns null when the container is missing
SNAPSHOT_SCRIPT = """
(selector) => {
  const box = document.querySelector(selector);
  if (!box) return null;
  const text = (node) => (node && node.textContent ? node.textContent.trim() : "");
  return Array.from(box.querySelectorAll("li")).map((li) => ({
    header: text(li.querySelector("span")),
    images: Array.from(li.querySelectorAll("img")).map((img) => {
      const wrapper = img.closest("div");
      const container = wrapper ? wrapper.parentElement : null;
      return {
        title: img.getAttribute("title"),
        alt: img.getAttribute("alt"),
        src: img.getAttribute("src") || "",
        blocks: container ? Array.from(container.querySelectorAll("div")).map(text) : null,
      };
    }),
  }));
}
"""


def match_header(header_text: str) -> Optional[str]:
    """Return the date text of an "Events for <date>" header, else None."""
    match = HEADER_PATTERN.search(header_text or "")
    return match.group(1).strip() if match else None


def clean_event_name(raw_name: str, prefix: str = EVENT_NAME_PREFIX) -> str:
    return raw_name.replace(prefix, "").strip()


def scan_text_blocks(blocks: List[str]) -> tuple:
    """
    Find the time-range and duration blocks among a container's texts.

    Blocks are scanned in document order and every match overwrites the
    previous one, so the last matching block wins.

    Returns:
        (time_text, duration_text), empty strings when nothing matched
    """
    time_text = ""
    duration_text = ""
    for block in blocks:
        text = (block or "").strip()
        if TIME_RANGE_PATTERN.search(text):
            time_text = text
        if DURATION_LABEL in text:
            duration_text = text
    return time_text, duration_text


def iter_fragments(snapshot: List[dict], prefix: str = EVENT_NAME_PREFIX) -> Iterator[RawFragment]:
    """
    Fold a page snapshot into raw fragments.

    Items whose header is not "Events for ..." are skipped, as are images
    with neither a title nor an alt text and images without a container.
    """
    for item in snapshot:
        date_text = match_header(item.get('header', ''))
        if date_text is None:
            continue

        for image in item.get('images') or []:
            raw_name = image.get('title') or image.get('alt') or ""
            if not raw_name:
                continue

            blocks = image.get('blocks')
            if blocks is None:
                logger.debug(f"Skipping '{raw_name}': no surrounding container")
                continue

            time_text, duration_text = scan_text_blocks(blocks)
            yield RawFragment(
                date_text=date_text,
                name=clean_event_name(raw_name, prefix),
                time_text=time_text,
                duration_text=duration_text,
                icon_path=image.get('src') or "",
            )


def validate_snapshot(snapshot: Any, selector: str = EVENT_BOX_SELECTOR) -> List[dict]:
    """
    Check the raw value returned by the page script.

    Raises:
        ContainerNotFoundError: If the container was missing
        ScraperParseError: If the value has an unexpected shape
    """
    if snapshot is None:
        raise ContainerNotFoundError(selector)
    if not isinstance(snapshot, list) or not all(isinstance(item, dict) for item in snapshot):
        raise ScraperParseError(f"Unexpected DOM snapshot: {type(snapshot).__name__}")
    return snapshot


class ExtractorService:
    """Reads raw fragments out of a rendered schedule page."""

    def __init__(self, selector: str = EVENT_BOX_SELECTOR, name_prefix: str = EVENT_NAME_PREFIX):
        self.selector = selector
        self.name_prefix = name_prefix

    async def extract(self, page: RenderedPage) -> Iterator[RawFragment]:
        """
        Snapshot the page and return a single-pass iterator of fragments.

        The container check happens before the iterator is returned.

        Raises:
            ContainerNotFoundError: If the schedule container is missing
        """
        snapshot = validate_snapshot(
            await page.evaluate_in_page(SNAPSHOT_SCRIPT, self.selector),
            self.selector,
        )
        logger.info(f"Snapshot holds {len(snapshot)} list item(s)")
        return iter_fragments(snapshot, self.name_prefix)
