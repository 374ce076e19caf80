"""Command dispatcher: applies a VoiceCommand to the market-run store.

One handler per intent. Every outcome, including a failing store call, comes
back as a CommandResponse; dispatch() never raises. The current run is read
from the store here rather than taken from the parse-time context, since the
list may have changed between hearing the command and acting on it.
"""

from martruns.commands.command import CommandContext, CommandResponse, Intent
from martruns.commands.resolve import find_item
from martruns.currency import format_price

NO_ACTIVE_RUN = "No active shopping list found"
UNKNOWN_COMMAND = "Unknown command"
GENERIC_FAILURE = "Something went wrong. Please try again."

# How many pending items list_items names before summarising the rest
LIST_PREVIEW = 3


def _fail(message):
    return CommandResponse(success=False, message=message)


def _not_found(entity):
    return _fail(f'"{entity}" not found in your list')


def _plural(n, word):
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


class CommandDispatcher:

    def __init__(self):
        self._handlers = {
            Intent.CREATE_RUN: self._create_run,
            Intent.ADD_ITEM: self._add_item,
            Intent.COMPLETE_ITEM: self._complete_item,
            Intent.REMOVE_ITEM: self._remove_item,
            Intent.ADD_NOTE: self._add_note,
            Intent.SET_PRICE: self._set_price,
            Intent.SET_BUDGET: self._set_budget,
            Intent.COMPLETE_RUN: self._complete_run,
            Intent.LIST_ITEMS: self._list_items,
            Intent.BUDGET_STATUS: self._budget_status,
            Intent.UNKNOWN: self._unknown,
        }
        missing = set(Intent) - set(self._handlers)
        if missing:
            raise ValueError(f"No handler for: {', '.join(sorted(i.value for i in missing))}")

    async def dispatch(self, command, store, context=None):
        """Run command against store. Returns a CommandResponse."""
        if context is None:
            context = CommandContext()
        handler = self._handlers[command.intent]
        try:
            return await handler(command, store, context)
        except Exception as e:
            return _fail(str(e) or GENERIC_FAILURE)

    # --- Handlers ---

    async def _create_run(self, command, store, context):
        if not command.entity:
            return _fail("Please specify a name for the shopping run")
        run_id = await store.create_run(command.entity, command.amount)
        return CommandResponse(True, f'Created "{command.entity}"', data={"run_id": run_id})

    async def _add_item(self, command, store, context):
        if not command.entity:
            return _fail("Please specify an item to add")
        item = {"name": command.entity, "category": "other", "completed": False}
        if command.amount is not None:
            item["estimated_price"] = command.amount
        await store.add_item(item)
        return CommandResponse(True, f"Added {command.entity}", data=item)

    async def _complete_item(self, command, store, context):
        if not command.entity:
            return _fail("Please specify which item you picked up")
        run = await store.get_current_run()
        if run is None:
            return _fail(NO_ACTIVE_RUN)
        item = find_item(run.items, command.entity)
        if item is None:
            return _not_found(command.entity)

        completed = not item.completed
        updates = {"completed": completed}
        if command.note:
            updates["note"] = command.note
        await store.update_item(item.id, updates)
        state = "complete" if completed else "not complete"
        return CommandResponse(True, f"Marked {item.name} as {state}",
                               data={"item_id": item.id, "name": item.name,
                                     "completed": completed})

    async def _remove_item(self, command, store, context):
        if not command.entity:
            return _fail("Please specify which item to remove")
        run = await store.get_current_run()
        if run is None:
            return _fail(NO_ACTIVE_RUN)
        item = find_item(run.items, command.entity)
        if item is None:
            return _not_found(command.entity)
        await store.remove_item(item.id)
        return CommandResponse(True, f"Removed {item.name}",
                               data={"item_id": item.id, "name": item.name})

    async def _add_note(self, command, store, context):
        if not command.entity:
            return _fail("Please specify which item the note is for")
        if not command.note:
            return _fail("Please specify the note to add")
        run = await store.get_current_run()
        if run is None:
            return _fail(NO_ACTIVE_RUN)
        item = find_item(run.items, command.entity)
        if item is None:
            return _not_found(command.entity)
        await store.update_item(item.id, {"note": command.note})
        return CommandResponse(True, f"Added note to {item.name}",
                               data={"item_id": item.id, "name": item.name})

    async def _set_price(self, command, store, context):
        if not command.entity:
            return _fail("Please specify which item the price is for")
        if command.amount is None:
            return _fail("Please specify the price")
        run = await store.get_current_run()
        if run is None:
            return _fail(NO_ACTIVE_RUN)
        item = find_item(run.items, command.entity)
        if item is None:
            return _not_found(command.entity)
        await store.update_item(item.id, {"estimated_price": command.amount})
        price = format_price(command.amount, context.currency)
        return CommandResponse(True, f"{item.name} set to {price}",
                               data={"item_id": item.id, "name": item.name})

    async def _set_budget(self, command, store, context):
        if command.amount is None:
            return _fail("Please specify a budget amount")
        run = await store.get_current_run()
        if run is None:
            return _fail(NO_ACTIVE_RUN)
        await store.update_run({"budget": command.amount})
        budget = format_price(command.amount, context.currency)
        return CommandResponse(True, f"Budget for {run.title} set to {budget}")

    async def _complete_run(self, command, store, context):
        run = await store.get_current_run()
        if run is None:
            return _fail(NO_ACTIVE_RUN)
        await store.complete_run(run.id)
        message = f"You picked up {run.completed_items} of {_plural(run.total_items, 'item')}."
        return CommandResponse(True, message, data={"run_id": run.id})

    async def _list_items(self, command, store, context):
        run = await store.get_current_run()
        if run is None:
            return _fail(NO_ACTIVE_RUN)
        if not run.items:
            return CommandResponse(True, "Your list is empty.")

        pending = [i.name for i in run.items if not i.completed]
        if pending:
            names = ", ".join(pending[:LIST_PREVIEW])
            if len(pending) > LIST_PREVIEW:
                names += f" +{len(pending) - LIST_PREVIEW} more"
            message = f"You still need {_plural(len(pending), 'item')}: {names}."
        else:
            message = "Everything on your list is done."
        message += f" {run.completed_items} completed."
        return CommandResponse(True, message, data={"pending": pending})

    async def _budget_status(self, command, store, context):
        run = await store.get_current_run()
        if run is None:
            return _fail(NO_ACTIVE_RUN)
        if run.budget is None:
            return CommandResponse(True, "No budget set for this run.")

        currency = context.currency
        spent = run.total_estimated
        remaining = run.budget - spent
        if remaining >= 0:
            message = (f"Spent {format_price(spent, currency)} of "
                       f"{format_price(run.budget, currency)}. "
                       f"Remaining: {format_price(remaining, currency)}.")
        else:
            message = (f"Over budget by {format_price(-remaining, currency)}. "
                       f"Estimated {format_price(spent, currency)} against "
                       f"{format_price(run.budget, currency)}.")
        return CommandResponse(True, message,
                               data={"budget": run.budget, "spent": spent, "remaining": remaining})

    async def _unknown(self, command, store, context):
        return _fail(UNKNOWN_COMMAND)


async def dispatch(command, store, context=None):
    """Module-level shortcut for CommandDispatcher().dispatch()."""
    return await CommandDispatcher().dispatch(command, store, context)
