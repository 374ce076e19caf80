"""Item-name cleanup, resolution against a run, and confidence scoring."""

import pytest

from martruns.commands.command import CommandContext, Intent
from martruns.commands.parser import CommandParser, normalize
from martruns.commands.resolve import (
    clean_item_name, extract_quantity, find_item, quantity_unit,
    resolve_item_name, score_confidence,
)
from martruns.store.base import MarketItem, MarketRun


def _run(*names, budget=None):
    items = [MarketItem(id=f"i{n}", name=name) for n, name in enumerate(names)]
    return MarketRun(id="r1", title="Weekly", items=items, budget=budget)


@pytest.mark.parametrize("raw, expected", [
    ("some 2 pounds of rice", "rice"),
    ("the eggs", "eggs"),
    ("a gallon of milk", "milk"),
    ("3 lbs chicken", "chicken"),
    ("2kg tomatoes", "kg tomatoes"),
    ("", ""),
    (None, ""),
])
def test_clean_item_name(raw, expected):
    assert clean_item_name(raw) == expected


def test_quantity_needs_a_unit():
    assert extract_quantity("2 pounds of rice") == 2.0
    assert extract_quantity("1.5 gal milk") == 1.5
    assert extract_quantity("3 apples") is None
    assert extract_quantity(None) is None


def test_quantity_unit_labels():
    assert quantity_unit("2 pounds of rice") == "lbs"
    assert quantity_unit("a gallon of milk") == "gallons"
    assert quantity_unit("8 oz cheese") == "oz"
    assert quantity_unit("3 apples") == "units"


def test_find_item_prefers_exact_match():
    run = _run("Milk Chocolate", "Milk")
    assert find_item(run.items, "milk").name == "Milk"


def test_find_item_substring_either_direction():
    run = _run("Fresh Tomatoes", "Red Onions")
    assert find_item(run.items, "tomatoes").name == "Fresh Tomatoes"
    assert find_item(run.items, "red onions please").name == "Red Onions"
    assert find_item(run.items, "kale") is None
    assert find_item(run.items, "") is None


def test_find_item_first_substring_hit_wins():
    run = _run("Chicken Breast", "Chicken Stock")
    assert find_item(run.items, "chicken").name == "Chicken Breast"


def test_resolve_tomatoes_to_canonical_name():
    assert resolve_item_name("tomatoes", _run("Fresh Tomatoes")) == "Fresh Tomatoes"


def test_resolve_unmatched_entity_unchanged():
    assert resolve_item_name("kale", _run("Fresh Tomatoes")) == "kale"
    assert resolve_item_name("kale", None) == "kale"


def test_confidence_adjustments():
    run = _run("Fresh Tomatoes")
    assert score_confidence("milk", None, None) == 0.8
    assert score_confidence("Fresh Tomatoes", None, run) == 0.95
    assert score_confidence("ab", None, None) == 0.6
    assert score_confidence("milk", 2.0, None) == 0.9
    assert score_confidence("Fresh Tomatoes", 4.0, run) == 1.0
    assert score_confidence("milk", 0.0, None) == 0.8


def test_confidence_bounds_for_every_case():
    parser = CommandParser()
    context = CommandContext(current_run=_run("Fresh Tomatoes", "Free-range Chicken"))
    for text in ["I need milk", "I got the chicken", "$4 for the tomatoes",
                 "remove it", "what time is it", "", "my budget is $50"]:
        cmd = parser.parse(text, context)
        if cmd.intent is Intent.UNKNOWN:
            assert cmd.confidence == 0
        else:
            assert 0.1 <= cmd.confidence <= 1.0


def test_parse_resolves_against_current_run():
    parser = CommandParser()
    run = _run("Fresh Tomatoes", "Free-range Chicken")
    with_run = CommandContext(current_run=run)

    cmd = parser.parse("I got the chicken", with_run)
    assert cmd.intent is Intent.COMPLETE_ITEM
    assert cmd.entity == "Free-range Chicken"
    assert cmd.confidence == pytest.approx(0.95)

    cmd = parser.parse("I got the chicken")
    assert cmd.entity == "chicken"

    cmd = parser.parse("remove kale", with_run)
    assert cmd.entity == "kale"


def test_normalize():
    assert normalize("  We're OUT of   milk!! ") == "were out of milk"
    assert normalize("The milk costs $3.50.") == "the milk costs $3.50"
    assert normalize("¿?") == ""


def test_create_run_default_title():
    from datetime import date
    parser = CommandParser(today=lambda: date(2024, 3, 9))
    cmd = parser.parse("I need to go shopping")
    assert cmd.intent is Intent.CREATE_RUN
    assert cmd.entity == "Market Run - " + date(2024, 3, 9).strftime("%x")


def test_suggestions():
    parser = CommandParser()
    assert "add bread" in parser.suggestions("add")
    context = CommandContext(current_run=_run("Eggs", "Milk"))
    assert parser.suggestions("complete", context) == ["complete Eggs", "complete Milk"]
    assert parser.suggestions("complete") == []
