"""Data-driven test suite for command parsing.

Reads test cases from test_cases.txt and checks that each utterance parses to
the expected intent and fields, with no shopping run in the context and
without touching any store.

See test_cases.txt for the file format.
"""

import pytest
from pathlib import Path

from martruns.commands.parser import CommandParser

_FIELDS = ("entity", "amount", "note")

_parser = CommandParser()


def _parse_value(s):
    """Parse a string value into the appropriate Python type."""
    if s == "none":
        return None
    try:
        return float(s)
    except ValueError:
        return s


def _load_test_cases():
    """Load test cases from test_cases.txt."""
    path = Path(__file__).parent / "test_cases.txt"
    cases = []
    current = None

    for line_num, line in enumerate(path.read_text().splitlines(), 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped.startswith("> "):
            if current:
                cases.append(current)
            current = {
                "input": stripped[2:],
                "intent": "unknown",
                "fields": {},
                "confidence": None,
                "line": line_num,
            }
            continue

        if current is None:
            continue

        key, _, value = stripped.partition(":")
        key = key.strip()
        value = value.strip()

        if key == "intent":
            current["intent"] = value
        elif key == "confidence":
            current["confidence"] = float(value)
        elif key in _FIELDS:
            # Entities and notes stay text even when they look numeric
            current["fields"][key] = _parse_value(value) if key == "amount" else (
                None if value == "none" else value)
        else:
            raise ValueError(f"test_cases.txt line {line_num}: unknown key {key!r}")

    if current:
        cases.append(current)

    return cases


_CASES = _load_test_cases()


def _fmt_command(cmd):
    """Format a VoiceCommand for failure output."""
    parts = [f"intent={cmd.intent.value}", f"confidence={cmd.confidence}"]
    for key in _FIELDS:
        value = getattr(cmd, key)
        if value is not None:
            parts.append(f"{key}={value!r}")
    return ", ".join(parts)


@pytest.mark.parametrize("case", _CASES, ids=[c["input"] for c in _CASES])
def test_parse(case):
    text = case["input"]
    cmd = _parser.parse(text)

    assert cmd.intent.value == case["intent"], (
        f"\n  Input:    {text!r}"
        f"\n  Expected: intent={case['intent']}"
        f"\n  Got:      {_fmt_command(cmd)}"
    )

    for key, expected in case["fields"].items():
        actual = getattr(cmd, key)
        assert actual == expected, (
            f"\n  Input:    {text!r}"
            f"\n  Expected: {key}={expected!r}"
            f"\n  Got:      {key}={actual!r}"
            f"\n  Full:     {_fmt_command(cmd)}"
        )

    if case["confidence"] is not None:
        assert cmd.confidence == pytest.approx(case["confidence"]), (
            f"\n  Input:    {text!r}"
            f"\n  Expected: confidence={case['confidence']}"
            f"\n  Got:      {_fmt_command(cmd)}"
        )

    # Every field the parse sets must be listed in the test case
    extra = [k for k in _FIELDS if getattr(cmd, k) is not None and k not in case["fields"]]
    assert not extra, (
        f"\n  Input:    {text!r}"
        f"\n  Fields not in test case: {', '.join(extra)}"
        f"\n  Full:     {_fmt_command(cmd)}"
        f"\n  Add these to test_cases.txt or remove from the parse."
    )


def test_parsing_is_idempotent():
    for case in _CASES:
        assert _parser.parse(case["input"]) == _parser.parse(case["input"])
