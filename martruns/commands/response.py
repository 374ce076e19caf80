"""Response generator: the sentence spoken (or shown) after a command runs."""

from martruns.commands.command import Intent
from martruns.commands.resolve import quantity_unit
from martruns.currency import format_price

UNKNOWN_HELP = ("I didn't understand that command. Try saying something like "
                "\"add milk to my list\" or \"create new shopping run\".")


def _item_name(command, result):
    """The item the dispatcher acted on, falling back to the parsed entity."""
    if isinstance(result.data, dict) and result.data.get("name"):
        return result.data["name"]
    return command.entity


def _quantity(amount):
    """2.0 -> '2', 1.5 -> '1.5'."""
    return f"{amount:g}"


class ResponseGenerator:

    def generate(self, command, result, context):
        if not result.success:
            return self._error(command, result.message)

        currency = context.currency or "$"
        intent = command.intent

        if intent is Intent.CREATE_RUN:
            budget = ""
            if command.amount:
                budget = f"Budget set to {format_price(command.amount, currency)}. "
            return f'Created "{command.entity}". {budget}Ready to add items!'

        if intent is Intent.ADD_ITEM:
            qty = ""
            if command.amount:
                qty = f" ({_quantity(command.amount)} {quantity_unit(command.context)})"
            return f"Added {command.entity}{qty} to your shopping list. What else do you need?"

        name = _item_name(command, result)

        if intent is Intent.COMPLETE_ITEM:
            if isinstance(result.data, dict) and result.data.get("completed") is False:
                return f"Unmarked {name}. It's back on your list."
            return f"Great! Marked {name} as complete. Keep up the good work!"

        if intent is Intent.REMOVE_ITEM:
            return f"Removed {name} from your list."

        if intent is Intent.ADD_NOTE:
            return f'Added note "{command.note}" to {name}.'

        if intent is Intent.SET_PRICE:
            return f"Updated {name} price to {format_price(command.amount, currency)}."

        if intent is Intent.SET_BUDGET:
            return (f"Budget set to {format_price(command.amount, currency)}. "
                    "Start adding items to your list!")

        if intent is Intent.COMPLETE_RUN:
            return f"Shopping run completed! {result.message}"

        if intent in (Intent.LIST_ITEMS, Intent.BUDGET_STATUS):
            return result.message

        return result.message or "Command completed successfully."

    def _error(self, command, error):
        intent = command.intent
        if intent is Intent.UNKNOWN:
            return UNKNOWN_HELP
        if intent is Intent.ADD_ITEM:
            return f'I couldn\'t add "{command.entity}" to your list. {error}'
        if intent is Intent.COMPLETE_ITEM and "not found" in error:
            return (f'I couldn\'t find "{command.entity}" in your list. '
                    "Could you try a different name?")
        if intent is Intent.REMOVE_ITEM:
            return f"I couldn't remove that. {error}"
        return f"Sorry, I couldn't complete that action. {error}"


def generate_response(command, result, context):
    """Module-level shortcut for ResponseGenerator().generate()."""
    return ResponseGenerator().generate(command, result, context)
