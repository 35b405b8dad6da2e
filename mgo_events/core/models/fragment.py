"""
Raw fragment model.

A fragment is one unparsed event record pulled out of the rendered schedule
page, before the normalizer turns it into an Event.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RawFragment:
    """
    One raw event record scraped from the page.

    Attributes:
        date_text: Date portion of the "Events for ..." header
        name: Event name with the site prefix stripped
        time_text: Text block holding the time range (may be empty)
        duration_text: Text block holding "Duration:" (may be empty)
        icon_path: Image ``src`` attribute, relative or absolute (may be empty)
    """

    date_text: str
    name: str
    time_text: str = ""
    duration_text: str = ""
    icon_path: str = ""

