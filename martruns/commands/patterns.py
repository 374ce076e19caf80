"""Pattern library: the ordered phrase table behind the command parser.

Each intent owns an ordered list of regular expressions matched (with
re.search) against normalized text, i.e. lowercased with apostrophes and most
punctuation already stripped, so "don't" arrives as "dont". Capture groups
are positional:

    create_run     (title, budget) or (budget, title)
    add_item       (item text, quantity still attached)
    complete_item  (item)
    remove_item    (item)
    add_note       (item, note)
    set_price      (item, price) or (price, item)
    set_budget     (budget,)
    complete_run, list_items, budget_status: no groups

Intents are tried in table order and patterns in list order; the first hit
wins. More specific phrasings sit before the catch-alls. "milk please" is the
last add_item pattern and refuses any text mentioning money, so
"the milk is $3 please" still reaches set_price.
"""

import re

from martruns.commands.command import Intent

CURRENCY_SYMBOLS = "$€£₦₵"

_CUR = f"[{CURRENCY_SYMBOLS}]?"
_AMOUNT = _CUR + r"(\d+(?:\.\d+)?)(?:\s+(?:dollars?|bucks))?"
_ABOUT = r"(?:about\s+|around\s+|roughly\s+)?"
_BUDGET_TAIL = rf"(?:\s+with(?:\s+a)?\s+budget\s+of\s+{_ABOUT}{_AMOUNT})?"
_END = r"(?:\s+(?:now|today|please))?$"
_LIST = r"(?:the\s+|my\s+|our\s+)?(?:shopping\s+|grocery\s+)?(?:list|cart)"
_NOTE_SEP = r"(?:\s*,\s*|\s+(?:that|saying)\s+)"

# Anywhere in the text: a price or a cost verb with a number
_MONEY = (rf".*(?:[{CURRENCY_SYMBOLS}]\d|\d\s+(?:dollars?|bucks)\b"
          r"|\b(?:costs?|is|are|was|were)\s+\d)")

# Words that open a sentence about the trip itself rather than an item
_NOT_AN_ITEM = (r"(?!(?:the\s+|my\s+|our\s+)?"
                r"(?:shopping|trip|run|list|everything|all|im|i|we|were|thats)\b)")

_TABLE = [
    (Intent.CREATE_RUN, [
        rf"\b(?:lets|let\s+me|im\s+gonna|im\s+going\s+to|i\s+need\s+to|time\s+to)\s+"
        rf"(?:go\s+)?(?:grocery\s+)?(?:shopping|shop|to\s+the\s+(?:store|market|grocery))"
        rf"(?:\s+for\s+(.+?))?{_BUDGET_TAIL}{_END}",
        rf"\b(?:start|create|make|new)\s+(?:a\s+)?(?:new\s+)?(?:shopping\s+)?(?:list|run|trip)"
        rf"(?:\s+(?:called|named|for)\s+(.+?))?{_BUDGET_TAIL}{_END}",
        rf"\b(?:create|start|make)\s+(?:a\s+)?(?:new\s+)?(?:shopping\s+)?(?:list|run|trip)\s+"
        rf"with(?:\s+a)?\s+budget\s+of\s+{_ABOUT}{_AMOUNT}"
        rf"(?:\s+(?:called|named|for)\s+(.+?))?{_END}",
        rf"\b(?:im\s+)?(?:going|heading)\s+(?:to\s+the\s+)?(?:store|market|grocery|supermarket)"
        rf"(?:\s+for\s+(.+?))?{_BUDGET_TAIL}{_END}",
        rf"^(?:its\s+)?shopping\s+(?:time|trip)(?:\s+for\s+(.+?))?{_BUDGET_TAIL}{_END}",
        rf"\b(?:i\s+|we\s+)?(?:need|want)\s+to\s+(?:go\s+)?(?:shopping|shop)"
        rf"(?:\s+for\s+(.+?))?{_BUDGET_TAIL}{_END}",
    ]),

    (Intent.ADD_ITEM, [
        # Direct needs
        r"^(?:i\s+|we\s+)?(?:need|want|gotta\s+get|have\s+to\s+get|should\s+get)\s+"
        r"(?!to\b)(?:some\s+)?(.+)",
        rf"\bcan\s+(?:you\s+)?(?:add|put)\s+(.+?)(?:\s+(?:to|on|in)\s+{_LIST})?(?:\s+please)?$",
        rf"^(?:please\s+)?(?:add|put|include)\s+(?!(?:a\s+)?note\b)(.+?)"
        rf"(?:\s+(?:to|on|in)\s+{_LIST})?(?:\s+please)?$",
        # Running out
        r"\b(?:(?:im|were)\s+)?(?:almost\s+out\s+of|running\s+low\s+on|out\s+of)\s+(?:the\s+)?(.+)",
        r"\b(?:need|want)\s+to\s+(?:get|buy|pick\s+up)\s+(?:some\s+)?(.+)",
        r"\blet'?s\s+(?:get|grab|pick\s+up)\s+(?:some\s+)?(.+)",
        r"\b(?:don'?t\s+forget(?:\s+to\s+get)?|remember\s+to\s+(?:get|buy))\s+(?:the\s+)?(.+)",
        # Already shopping
        r"\bwhile\s+(?:im|were)\s+(?:there|at\s+it|shopping),?\s+(?:get|grab|pick\s+up)\s+"
        r"(?:some\s+)?(.+)",
        r"^(?:oh,?\s+)?(?:and\s+)?(?:also\s+)?(?:get|grab|buy|pick\s+up)\s+(?:some\s+)?(.+)",
        # Catch-all
        rf"^(?!{_MONEY})(.+?)\s+(?:please|too|as\s+well|also)$",
    ]),

    (Intent.COMPLETE_ITEM, [
        r"^(?:i\s+|we\s+)?(?:got|found|picked\s+up|grabbed|bought)\s+"
        # not "i got $50" or "i got 50 dollars to spend", which are budgets
        rf"(?!everything\b|it\s+all\b|[{CURRENCY_SYMBOLS}]\d"
        r"|\d+(?:\.\d+)?(?:\s+(?:dollars?|bucks)\b|$))(?:the\s+|some\s+)?(.+)",
        r"\b(?:check|mark|cross)\s+off\s+(?:the\s+)?(.+)",
        r"^(?:complete|mark)\s+(?!(?:the\s+|my\s+)?(?:shopping|run|trip|list)\b)(?:the\s+)?(.+?)"
        r"(?:\s+as\s+(?:done|complete|completed|finished))?$",
        rf"^{_NOT_AN_ITEM}(.+?)\s+(?:is\s+|are\s+)?"
        r"(?:done|complete|finished|checked\s+off|in\s+the\s+cart|check)$",
        r"\b(?:thats|that\s+is)\s+(?:the\s+)?(.+?)\s+(?:done|finished|complete)$",
        r"^(?:yep|yes|yeah),?\s+(?:got|found)\s+(?:the\s+)?(.+)",
        r"\balready\s+got\s+(?:the\s+)?(.+)",
    ]),

    (Intent.REMOVE_ITEM, [
        r"\b(?:don'?t|do\s+not)\s+(?:need|want)\s+(?!to\b)(?:the\s+|any\s+)?(.+?)(?:\s+anymore)?$",
        r"\b(?:no\s+longer\s+need|changed\s+my\s+mind\s+about)\s+(?:the\s+)?(.+)",
        rf"\b(?:remove|delete|take\s+off)\s+(?:the\s+)?(.+?)(?:\s+(?:from|off)\s+{_LIST})?$",
        rf"\btake\s+(?:the\s+)?(.+?)\s+off(?:\s+{_LIST})?$",
        r"^(?:actually,?\s+)?(?:don'?t\s+(?:get|buy)|skip)\s+(?:the\s+)?(.+)",
        r"\b(?:forget|cancel)\s+(?:about\s+)?(?:the\s+)?(.+)",
        r"\b(?:we|i)\s+already\s+have\s+(?:enough\s+)?(?:the\s+)?(.+)",
    ]),

    (Intent.ADD_NOTE, [
        rf"\b(?:note|remember)\s+for\s+(?:the\s+)?(.+?)(?:{_NOTE_SEP}(.+))?$",
        rf"\badd\s+(?:a\s+)?note\s+(?:to|for|on)\s+(?:the\s+)?(.+?)(?:{_NOTE_SEP}(.+))?$",
        r"\b(?:make\s+sure|remember)\s+(?:the\s+)?(.+?)\s+(?:is|has|needs\s+to\s+be)\s+(.+)",
        r"^(?:for\s+the\s+)?(.+?),?\s+(?:make\s+sure|remember|note)\s+(.+)",
    ]),

    (Intent.SET_PRICE, [
        rf"^(?!.*\b(?:budget|limit|max|spend|spent)\b)(?:the\s+)?(?:price\s+of\s+)?(?:the\s+)?"
        rf"(.+?)\s+(?:costs?|is|was|are|were|priced\s+at)\s+{_ABOUT}{_AMOUNT}",
        rf"^{_ABOUT}{_AMOUNT}\s+(?:each\s+)?for\s+(?:the\s+)?(.+)",
        rf"\bexpect\s+{_ABOUT}{_AMOUNT}\s+for\s+(?:the\s+)?(.+)",
        rf"\bbudget\s+{_ABOUT}{_AMOUNT}\s+for\s+(?:the\s+)?(.+)",
        rf"^(?:the\s+)?(.+?)\s+(?:should\s+be|usually\s+costs?)\s+{_ABOUT}{_AMOUNT}",
    ]),

    (Intent.SET_BUDGET, [
        rf"\b(?:i\s+(?:have|got|can\s+spend)|my\s+budget\s+is|budget\s+(?:of|is))\s+{_ABOUT}{_AMOUNT}",
        rf"\btrying\s+to\s+(?:spend|keep\s+it)\s+(?:under|below)\s+{_AMOUNT}",
        rf"\bdon'?t\s+want\s+to\s+spend\s+more\s+than\s+{_AMOUNT}",
        rf"\b(?:limit|max)\s+(?:is|of)\s+{_AMOUNT}",
        rf"\bplanning\s+to\s+spend\s+{_ABOUT}{_AMOUNT}",
        rf"\bset\s+(?:the\s+|my\s+|a\s+)?budget\s+(?:to|at|of)\s+{_AMOUNT}",
    ]),

    (Intent.COMPLETE_RUN, [
        r"^(?:im\s+|i\s+am\s+|were\s+|we\s+are\s+)?(?:all\s+)?(?:done|finished)"
        r"(?:\s+shopping|\s+with\s+(?:shopping|the\s+(?:shopping|list|trip|run)))?$",
        r"^(?:thats\s+)?(?:everything|all)(?:\s+(?:i\s+need|on\s+(?:the\s+)?list|for\s+today))?$",
        r"\b(?:ready\s+to\s+)?(?:checkout|check\s+out|head\s+(?:to\s+)?(?:checkout|the\s+register))\b",
        r"\b(?:shopping\s+)?(?:trip|run)\s+(?:is\s+)?(?:complete|done|finished)\b",
        r"\b(?:time\s+to\s+)?(?:pay|go\s+to\s+checkout)\b",
        r"\b(?:got\s+everything|all\s+done|all\s+set)\b",
        r"^(?:complete|finish|end)\s+(?:the\s+|my\s+)?(?:shopping\s+)?(?:run|trip|list)$",
    ]),

    (Intent.LIST_ITEMS, [
        r"\b(?:what\s+)?do\s+(?:i|we)\s+(?:still\s+)?(?:need|have\s+to\s+get|gotta\s+get)\b",
        r"\b(?:whats|what\s+is)\s+(?:still\s+)?(?:on\s+(?:the\s+|my\s+)?(?:list|agenda)"
        r"|left(?:\s+to\s+(?:get|buy))?$)",
        r"\b(?:show|tell)\s+(?:me\s+)?(?:the\s+|my\s+)?(?:list|what\s+(?:i|we)\s+need)\b",
        r"\b(?:what|anything)\s+else(?:\s+(?:do\s+(?:i|we)\s+need|on\s+the\s+list))?\b",
        r"\b(?:list|what)\s+(?:do\s+(?:i|we)\s+have\s+)?(?:left|remaining)\b",
        r"^(?:read|list)\s+(?:me\s+)?(?:the\s+|my\s+)?(?:list|items)$",
    ]),

    (Intent.BUDGET_STATUS, [
        r"\bhow\s+(?:much\s+)?(?:money\s+)?(?:do\s+(?:i|we)\s+have\s+left|is\s+left)",
        r"\b(?:whats|what\s+is)\s+(?:my|our|the)\s+(?:budget|spending)"
        r"(?:\s+(?:like|status|looking\s+like))?",
        r"\bhow\s+(?:am\s+i|are\s+we)\s+doing(?:\s+on\s+(?:budget|money|spending))?",
        r"\b(?:am\s+i|are\s+we)\s+(?:still\s+)?(?:on|within|under|over)\s+budget\b",
        r"\bhow\s+much\s+(?:have\s+(?:i|we)\s+spent|money\s+spent|did\s+(?:i|we)\s+spend)",
        r"^(?:check\s+(?:the\s+|my\s+)?)?budget(?:\s+status)?$",
    ]),
]


def _compile_table(table):
    return tuple(
        (intent, tuple(re.compile(p, re.IGNORECASE) for p in patterns))
        for intent, patterns in table
    )


PATTERNS = _compile_table(_TABLE)

# Declared order in which the parser tries intents
INTENT_ORDER = tuple(intent for intent, _ in PATTERNS)


def patterns_for(intent):
    """Return the compiled patterns for an intent (empty for unknown)."""
    for i, compiled in PATTERNS:
        if i is intent:
            return compiled
    return ()
