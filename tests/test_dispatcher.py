"""Dispatching parsed commands against a market-run store."""

import asyncio

import pytest

from martruns.commands.command import CommandContext, Intent, VoiceCommand
from martruns.commands.dispatcher import CommandDispatcher, NO_ACTIVE_RUN
from martruns.commands.parser import CommandParser
from martruns.commands.response import generate_response
from martruns.store.base import MarketItem, MarketRun
from martruns.store.memory import MemoryMarketStore

_parser = CommandParser()
_dispatcher = CommandDispatcher()


def _store(*items, budget=None):
    if not items:
        return MemoryMarketStore()
    run = MarketRun(id="r1", title="Weekly", budget=budget, items=[
        MarketItem(id=f"i{n}", name=name, estimated_price=price)
        for n, (name, price) in enumerate(items)])
    return MemoryMarketStore(runs=[run])


def _say(text, store):
    """Parse against the store's current run, then dispatch."""
    async def go():
        context = CommandContext(current_run=await store.get_current_run())
        cmd = _parser.parse(text, context)
        return cmd, await _dispatcher.dispatch(cmd, store, context)
    return asyncio.run(go())


def _current(store):
    return asyncio.run(store.get_current_run())


def test_every_intent_has_a_handler():
    for intent in Intent:
        assert intent in _dispatcher._handlers


def test_add_item_to_empty_store():
    store = _store()
    cmd, result = _say("I need milk", store)
    assert result.success
    assert "milk" in result.message
    assert [i.name for i in _current(store).items] == ["milk"]


def test_add_item_quantity_becomes_estimate():
    store = _store()
    _say("add 2 pounds of rice", store)
    item = _current(store).items[0]
    assert item.name == "rice"
    assert item.estimated_price == 2.0


def test_complete_item_resolves_and_toggles():
    store = _store(("Free-range Chicken", None))
    cmd, result = _say("I got the chicken", store)
    assert cmd.entity == "Free-range Chicken"
    assert result.success
    assert _current(store).items[0].completed is True

    _say("I got the chicken", store)
    assert _current(store).items[0].completed is False


def test_second_complete_says_unmarked():
    store = _store(("Free-range Chicken", None))
    _say("I got the chicken", store)
    cmd, result = _say("I got the chicken", store)
    assert result.data["name"] == "Free-range Chicken"
    assert result.data["completed"] is False
    text = generate_response(cmd, result, CommandContext())
    assert text == "Unmarked Free-range Chicken. It's back on your list."


def test_complete_item_without_run():
    cmd, result = _say("I got the chicken", _store())
    assert cmd.entity == "chicken"
    assert not result.success
    assert result.message == NO_ACTIVE_RUN


def test_remove_missing_item():
    store = _store(("Milk", None))
    cmd, result = _say("remove kale", store)
    assert not result.success
    assert result.message == '"kale" not found in your list'
    assert len(_current(store).items) == 1


def test_remove_item():
    store = _store(("Milk", None), ("Eggs", None))
    cmd, result = _say("take the milk off my list", store)
    assert result.success
    assert [i.name for i in _current(store).items] == ["Eggs"]


def test_add_note():
    store = _store(("Bread", None))
    cmd, result = _say("note for bread, get sourdough", store)
    assert result.success
    assert _current(store).items[0].note == "get sourdough"


def test_set_price():
    store = _store(("Large Eggs", None))
    cmd, result = _say("$4 for the eggs", store)
    assert result.success
    assert _current(store).items[0].estimated_price == 4.0


def test_set_budget_needs_a_run():
    cmd, result = _say("my budget is $50", _store())
    assert cmd.intent is Intent.SET_BUDGET
    assert cmd.amount == 50
    assert not result.success
    assert result.message == NO_ACTIVE_RUN


def test_set_budget():
    store = _store(("Milk", None))
    cmd, result = _say("my budget is $50", store)
    assert result.success
    assert _current(store).budget == 50.0


def test_budget_status_remaining():
    store = _store(("Milk", 40.0), ("Cheese", 25.0), budget=100.0)
    cmd, result = _say("how much money do we have left", store)
    assert result.success
    assert "Remaining: $35.00" in result.message
    assert result.data["remaining"] == pytest.approx(35.0)


def test_budget_status_over_and_unset():
    store = _store(("Steak", 80.0), budget=50.0)
    assert "Over budget by $30.00" in _say("are we over budget", store)[1].message
    assert _say("are we over budget", _store(("Milk", 3.0)))[1].message == \
        "No budget set for this run."


def test_list_items():
    store = _store(("A", None), ("B", None), ("C", None), ("D", None), ("E", None))
    asyncio.run(store.update_item("i0", {"completed": True}))
    cmd, result = _say("what do I still need", store)
    assert result.message == "You still need 4 items: B, C, D +1 more. 1 completed."


def test_list_empty_run():
    store = MemoryMarketStore()
    asyncio.run(store.create_run("Weekly"))
    assert _say("what's left", store)[1].message == "Your list is empty."


def test_complete_run():
    store = _store(("Milk", None), ("Eggs", None))
    asyncio.run(store.update_item("i1", {"completed": True}))
    cmd, result = _say("I'm done shopping", store)
    assert result.success
    assert result.message == "You picked up 1 of 2 items."
    assert _current(store) is None


def test_create_run():
    store = _store()
    cmd, result = _say("create a new list called party with a budget of 100", store)
    assert result.success
    run = _current(store)
    assert run.id == result.data["run_id"]
    assert run.title == "party"
    assert run.budget == 100.0


def test_unknown_fails():
    cmd, result = _say("what time is it", _store())
    assert not result.success
    assert result.message == "Unknown command"


def test_missing_fields():
    store = _store(("Milk", None))
    result = asyncio.run(_dispatcher.dispatch(
        VoiceCommand(Intent.SET_PRICE, entity="Milk"), store))
    assert result.message == "Please specify the price"
    result = asyncio.run(_dispatcher.dispatch(VoiceCommand(Intent.ADD_ITEM), store))
    assert result.message.startswith("Please specify")


def test_store_errors_become_failed_responses():
    class BrokenStore(MemoryMarketStore):
        async def add_item(self, item):
            raise RuntimeError("database offline")

    result = asyncio.run(_dispatcher.dispatch(
        VoiceCommand(Intent.ADD_ITEM, entity="milk"), BrokenStore()))
    assert not result.success
    assert result.message == "database offline"


def test_dispatch_uses_fresh_run_not_context():
    # The context says "Milk" exists, but the store's run has since changed
    store = _store(("Eggs", None))
    stale = CommandContext(current_run=MarketRun(
        id="r1", title="Weekly", items=[MarketItem(id="x", name="Milk")]))
    result = asyncio.run(_dispatcher.dispatch(
        VoiceCommand(Intent.REMOVE_ITEM, entity="Milk"), store, stale))
    assert result.message == '"Milk" not found in your list'
