"""
Per-provider weekly schedule rules.

Every provider starts from the same ten hourly slots (9:00 AM to
6:00 PM). A provider's rule then removes slots on every day, removes
slots on weekends only, or replaces the day with a fixed whitelist.
Rules live in a table so adding a provider is a data change.

Provider names arrive in several spellings ("KIKI", "Kiki's Nails",
"Kiki Nails"). ``resolve_provider`` maps them onto one rule: an exact
alias lookup first, then a substring match against each rule's match
terms in table order. Unknown names get the unmodified base template.

Usage:
    schedule = get_provider_day_schedule("Kiki's Nails")
    schedule[6]  # Saturday slots, without 1:00 PM
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from booking_engine.utils import normalize_name

logger = logging.getLogger(__name__)

BASE_TEMPLATE: tuple[str, ...] = (
    "9:00 AM", "10:00 AM", "11:00 AM", "12:00 PM", "1:00 PM",
    "2:00 PM", "3:00 PM", "4:00 PM", "5:00 PM", "6:00 PM",
)

SUNDAY = 0
SATURDAY = 6
WEEKEND_DAYS = frozenset({SUNDAY, SATURDAY})


@dataclass(frozen=True)
class ScheduleRule:
    """Schedule exceptions for one provider.

    ``aliases`` match the whole normalised name; ``match_terms`` match
    anywhere inside it. ``whitelist`` replaces the base template.
    """

    provider_id: str
    display_name: str
    aliases: tuple[str, ...] = ()
    match_terms: tuple[str, ...] = ()
    removed_slots: frozenset[str] = frozenset()
    weekend_removed_slots: frozenset[str] = frozenset()
    whitelist: Optional[tuple[str, ...]] = None

    def slots_for_day(self, day_of_week: int) -> list[str]:
        slots = list(self.whitelist if self.whitelist is not None else BASE_TEMPLATE)
        slots = [s for s in slots if s not in self.removed_slots]
        if day_of_week in WEEKEND_DAYS:
            slots = [s for s in slots if s not in self.weekend_removed_slots]
        return slots


LUNCH = frozenset({"12:00 PM"})
LUNCH_HOURS = frozenset({"12:00 PM", "1:00 PM"})
ONE_PM = frozenset({"1:00 PM"})

# Table order matters for substring matching.
PROVIDER_RULES: tuple[ScheduleRule, ...] = (
    ScheduleRule(
        "kathrine", "Styled by Kathrine",
        aliases=("KATHRINE",),
        match_terms=("KATHRINE",),
        removed_slots=LUNCH,
        weekend_removed_slots=frozenset({"9:00 AM", "6:00 PM"}),
    ),
    ScheduleRule(
        "diva_nails", "Diva Nails",
        aliases=("DIVANA", "DIVA"),
        match_terms=("DIVA",),
        removed_slots=LUNCH_HOURS,
    ),
    ScheduleRule(
        "your_lashed", "Your Lashed",
        aliases=("LASHED",),
        match_terms=("LASHED",),
        weekend_removed_slots=frozenset({"9:00 AM"}),
    ),
    ScheduleRule(
        "vikki_laid", "Vikki Laid",
        aliases=("VIKKI",),
        match_terms=("VIKKI",),
        whitelist=("10:00 AM", "11:00 AM", "2:00 PM", "3:00 PM", "4:00 PM"),
    ),
    ScheduleRule(
        "makeup_by_mya", "Makeup by Mya",
        aliases=("MYA",),
        match_terms=("MYA",),
        removed_slots=ONE_PM,
    ),
    ScheduleRule(
        "hair_by_jennifer", "Hair by Jennifer",
        aliases=("JENNIFER",),
        match_terms=("JENNIFER",),
        removed_slots=LUNCH,
    ),
    ScheduleRule(
        "jana_aesthetics", "Jana Aesthetics",
        aliases=("JANA",),
        match_terms=("JANA",),
        removed_slots=LUNCH_HOURS,
    ),
    ScheduleRule(
        "her_brows", "Her Brows",
        match_terms=("HER BROWS",),
        weekend_removed_slots=frozenset({"6:00 PM"}),
    ),
    ScheduleRule(
        "kikis_nails", "Kiki's Nails",
        aliases=("KIKI", "KIKI NAILS"),
        match_terms=("KIKI",),
        removed_slots=ONE_PM,
    ),
    ScheduleRule(
        "rosemay_aesthetics", "RoseMay Aesthetics",
        aliases=("ROSEMAY",),
        match_terms=("ROSEMAY",),
        removed_slots=LUNCH_HOURS,
    ),
    ScheduleRule(
        "filler_by_jess", "Filler by Jess",
        aliases=("JESS",),
        match_terms=("FILLER BY JESS",),
        removed_slots=LUNCH_HOURS,
    ),
    ScheduleRule(
        "eyebrow_deluxe", "Eyebrow Deluxe",
        aliases=("EYEBROW",),
        match_terms=("EYEBROW DELUXE",),
        weekend_removed_slots=frozenset({"6:00 PM"}),
    ),
    ScheduleRule(
        "lashes_galore", "Lashes Galore",
        aliases=("GALORE",),
        match_terms=("LASHES GALORE",),
        weekend_removed_slots=frozenset({"9:00 AM"}),
    ),
    ScheduleRule(
        "zee_nail_artist", "Zee Nail Artist",
        aliases=("ZEE",),
        match_terms=("ZEE NAIL",),
        removed_slots=ONE_PM,
    ),
    ScheduleRule(
        "painted_by_zoe", "Painted by Zoe",
        aliases=("ZOE",),
        match_terms=("PAINTED BY ZOE",),
        removed_slots=LUNCH,
    ),
    ScheduleRule(
        "braided_slick", "Braided Slick",
        aliases=("BRAIDED",),
        match_terms=("BRAIDED SLICK",),
        removed_slots=LUNCH,
        weekend_removed_slots=frozenset({"9:00 AM"}),
    ),
    ScheduleRule(
        "lash_bae", "Lash Bae",
        aliases=("LASHBAE", "BAE"),
    ),
    ScheduleRule(
        "slicked_by_jennifer", "Slicked by Jennifer",
        aliases=("SLICKED",),
    ),
)


def _build_exact_index(rules: tuple[ScheduleRule, ...]) -> dict[str, ScheduleRule]:
    index: dict[str, ScheduleRule] = {}
    for rule in rules:
        keys = (rule.provider_id, rule.display_name, *rule.aliases)
        for key in keys:
            index.setdefault(normalize_name(key), rule)
    return index


_EXACT_INDEX = _build_exact_index(PROVIDER_RULES)


def resolve_provider(provider_name: Optional[str]) -> Optional[ScheduleRule]:
    """Map any known spelling of a provider name onto its rule, or None."""
    if not provider_name or not provider_name.strip():
        return None
    normalized = normalize_name(provider_name)

    rule = _EXACT_INDEX.get(normalized)
    if rule is not None:
        return rule

    for rule in PROVIDER_RULES:
        if any(term in normalized for term in rule.match_terms):
            return rule

    logger.debug("No schedule rule for provider '%s'", provider_name)
    return None


def get_full_provider_name(provider_name: str) -> str:
    """Return the provider's display name, or the input when unknown."""
    rule = resolve_provider(provider_name)
    return rule.display_name if rule else provider_name


def same_provider(first: str, second: str) -> bool:
    """True when both names resolve to one provider (or match ignoring case)."""
    rule_a = resolve_provider(first)
    rule_b = resolve_provider(second)
    if rule_a is not None or rule_b is not None:
        return rule_a is rule_b
    return normalize_name(first) == normalize_name(second)


def get_provider_day_schedule(provider_name: str) -> dict[int, list[str]]:
    """
    Base offered slots per weekday (0 = Sunday .. 6 = Saturday).

    Pure: no I/O and no bookings are consulted.
    """
    rule = resolve_provider(provider_name)
    if rule is None:
        return {day: list(BASE_TEMPLATE) for day in range(7)}
    return {day: rule.slots_for_day(day) for day in range(7)}


def day_of_week(value: date) -> int:
    """Weekday index with Sunday as 0 (``date.weekday`` uses Monday = 0)."""
    return (value.weekday() + 1) % 7
