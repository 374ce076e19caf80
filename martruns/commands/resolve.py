"""Item-name cleanup, resolution against the current run, and confidence scoring.

Resolution runs twice per command: once while parsing, to pick a canonical
name and score the parse, and again in the dispatcher against the run as it
is just before the mutation.

Known limitations, kept on purpose:
    - digit runs are stripped wherever they appear, so "2kg tomatoes" becomes
      "kg tomatoes" and "rice 5kg" becomes "rice kg";
    - substring matches take the first item in insertion order, so "chicken"
      resolves to whichever of "Chicken Breast" / "Chicken Stock" was added first.
"""

import re

BASE_CONFIDENCE = 0.8
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0

_ARTICLES_RE = re.compile(r"\b(?:some|a|an|the)\b", re.IGNORECASE)
_UNITS_RE = re.compile(
    r"\b(?:pounds?|lbs?|ounces?|oz|gallons?|gal)\b(?:\s+of\b)?", re.IGNORECASE)
_DIGITS_RE = re.compile(r"\d+(?:\.\d+)?")
_SPACES_RE = re.compile(r"\s+")

_QUANTITY_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:pounds?|lbs?|gallons?|gal|ounces?|oz)\b", re.IGNORECASE)

# (substrings to look for, label), checked in order
_UNIT_LABELS = [
    (("pound", "lb"), "lbs"),
    (("gallon", "gal"), "gallons"),
    (("ounce", "oz"), "oz"),
]


def clean_item_name(raw):
    """Strip articles, units, and quantities from a spoken item name.

    >>> clean_item_name("some 2 pounds of rice")
    'rice'
    """
    if not raw:
        return ""
    name = _ARTICLES_RE.sub("", raw)
    name = _UNITS_RE.sub("", name)
    name = _DIGITS_RE.sub("", name)
    return _SPACES_RE.sub(" ", name).strip()


def extract_quantity(text):
    """Return the number attached to a unit word ("2 pounds"), or None."""
    if not text:
        return None
    m = _QUANTITY_RE.search(text)
    if m is None:
        return None
    return float(m.group(1))


def quantity_unit(text):
    """Label for the unit mentioned in text: 'lbs', 'gallons', 'oz' or 'units'."""
    t = (text or "").lower()
    for needles, label in _UNIT_LABELS:
        if any(n in t for n in needles):
            return label
    return "units"


def find_item(items, name):
    """Find an item by name: exact (case-insensitive) first, then substring.

    A substring hit in either direction counts ("tomatoes" finds
    "Fresh Tomatoes", "red onions please" finds "Red Onions"). Returns the
    first hit in list order, or None.
    """
    if not name:
        return None
    wanted = name.lower()
    for item in items:
        if item.name.lower() == wanted:
            return item
    for item in items:
        have = item.name.lower()
        if wanted in have or have in wanted:
            return item
    return None


def resolve_item_name(entity, run):
    """Map a cleaned entity onto the canonical name of an item in run.

    Returns the entity unchanged when there is no run, no entity, or no match
    (it is then treated as a new item name).
    """
    if run is None or not entity:
        return entity
    item = find_item(run.items, entity)
    if item is None:
        return entity
    return item.name


def score_confidence(entity, amount, run):
    """Adjust the base confidence for a matched command, clamped to 0.1-1.0."""
    confidence = BASE_CONFIDENCE

    if entity and run is not None:
        wanted = entity.lower()
        if any(wanted in item.name.lower() for item in run.items):
            confidence += 0.15

    if entity and len(entity) < 3:
        confidence -= 0.2

    if amount is not None and amount > 0:
        confidence += 0.1

    return round(max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence)), 2)
