"""Telegram front end: type shopping commands instead of speaking them.

Runs in a daemon thread beside the voice loop and uses the same
CommandRouter, so both see one shopping list.

Needs martruns/telegram_credentials.py defining TELEGRAM_TOKEN (from
@BotFather). Without it, start_telegram() prints a notice and returns False.
"""

import asyncio
import threading

from telegram import Update
from telegram.ext import (
    ApplicationBuilder, CommandHandler, ContextTypes, MessageHandler, filters,
)

WELCOME = ("Tell me what you need, like \"add milk to my list\", "
           "\"I got the eggs\" or \"my budget is $50\".")

# Slash commands that stand for a spoken phrase
SHORTCUTS = {
    "list": "what's on my list",
    "budget": "how much do I have left",
    "done": "we're done shopping",
}


def _log(msg):
    print(msg, flush=True)


def _source(update):
    user = update.message.from_user
    name = (user.first_name or user.username or "unknown") if user else "unknown"
    return f"[Telegram:{name}]"


def make_handlers(router):
    """Build the (message, shortcut, start) callbacks bound to router."""

    async def reply(update, text):
        source = _source(update)
        _log(f"  {source} \"{text}\"")
        try:
            response, command = await router.route(text, source=source)
        except Exception as e:
            _log(f"  {source} failed: {e}")
            response = "Sorry, something went wrong with that."
        else:
            _log(f"  -> {command.intent.value}: \"{response}\"")
        await update.message.reply_text(response)

    async def on_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
        if update.message and update.message.text:
            await reply(update, update.message.text)

    async def on_shortcut(update: Update, context: ContextTypes.DEFAULT_TYPE):
        name = update.message.text.lstrip("/").split()[0].split("@")[0]
        await reply(update, SHORTCUTS[name])

    async def on_start(update: Update, context: ContextTypes.DEFAULT_TYPE):
        shortcuts = " ".join(f"/{name}" for name in SHORTCUTS)
        await update.message.reply_text(f"{WELCOME}\nShortcuts: {shortcuts}")

    return on_message, on_shortcut, on_start


async def _run_bot_async(token, router):
    on_message, on_shortcut, on_start = make_handlers(router)
    app = ApplicationBuilder().token(token).build()
    app.add_handler(CommandHandler("start", on_start))
    app.add_handler(CommandHandler(list(SHORTCUTS), on_shortcut))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, on_message))

    await app.initialize()
    await app.updater.start_polling(drop_pending_updates=True)
    await app.start()
    _log("Telegram bot started.")
    await asyncio.Event().wait()  # until the daemon thread dies with the process


def _run_bot(token, router):
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    loop.run_until_complete(_run_bot_async(token, router))


def start_telegram(router):
    """Start the bot in a daemon thread. Returns False if no token is set."""
    try:
        from martruns.telegram_credentials import TELEGRAM_TOKEN as token
    except ImportError:
        _log("No telegram_credentials.py; Telegram disabled.")
        return False

    threading.Thread(target=_run_bot, args=(token, router), daemon=True).start()
    return True
