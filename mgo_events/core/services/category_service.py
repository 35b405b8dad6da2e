"""
Event category classification.

Categories are assigned from keywords in the event name. The rules are checked
in declaration order and the first match wins, so a name matching several rules
("Mega Season Heist") takes the earliest one.
"""

from typing import Sequence, Tuple

from mgo_events.core.models import EventCategory

CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], EventCategory], ...] = (
    (("milestone",), EventCategory.MILESTONE),
    (("partners", "jedi"), EventCategory.PARTNER_EVENT),
    (("bash", "builders"), EventCategory.TOURNAMENT),
    (("roller", "high"), EventCategory.QUICK_EVENT),
    (("heist", "mega"), EventCategory.TOURNAMENT),
    (("chance", "lucky"), EventCategory.QUICK_EVENT),
    (("season", "league"), EventCategory.SEASON),
    (("blitz", "golden"), EventCategory.SPECIAL_EVENT),
    (("boom", "sticker"), EventCategory.SPECIAL_EVENT),
)


class CategoryService:
    """Keyword-rule classifier for event names."""

    def __init__(
        self,
        rules: Sequence[Tuple[Tuple[str, ...], EventCategory]] = CATEGORY_RULES,
        default: EventCategory = EventCategory.EVENT,
    ):
        self.rules = tuple(rules)
        self.default = default

    def classify(self, name: str) -> EventCategory:
        """
        Classify an event name.

        Args:
            name: Event name, any casing

        Returns:
            Category of the first matching rule, or the default category
        """
        lowered = name.lower()
        for keywords, category in self.rules:
            if any(keyword in lowered for keyword in keywords):
                return category
        return self.default


def classify_event_name(name: str) -> EventCategory:
    """Classify a name with the default rule set."""
    return _default_service.classify(name)


_default_service = CategoryService()
