"""In-process market-run store, optionally persisted to a JSON file.

Used by the CLI chat, the voice loop and the tests. With save_path set, every
mutation rewrites the file (write to .tmp, then rename) and the file is loaded
once at construction.
"""

import copy
import json
import uuid
from dataclasses import fields
from datetime import date
from pathlib import Path

from martruns.store.base import MarketItem, MarketRun, MarketStore, RUN_STATUSES

_DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"
DEFAULT_SAVE_PATH = _DATA_DIR / "market_runs.json"

_ITEM_FIELDS = {f.name for f in fields(MarketItem)} - {"id"}
_RUN_UPDATABLE = {"title", "date", "status", "budget", "scheduled_date"}


def _new_id():
    return uuid.uuid4().hex[:12]


class MemoryMarketStore(MarketStore):

    def __init__(self, runs=None, save_path=None, today=date.today):
        self._runs = {}
        self._current_id = None
        self._save_path = Path(save_path) if save_path else None
        self._today = today
        if self._save_path is not None:
            self._load()
        for run in runs or []:
            self._runs[run.id] = run
            if run.status != "completed":
                self._current_id = run.id

    # --- Persistence ---

    def _save(self):
        if self._save_path is None:
            return
        self._save_path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "current": self._current_id,
            "runs": [r.to_dict() for r in self._runs.values()],
        }
        tmp = self._save_path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, indent=2) + "\n")
        tmp.rename(self._save_path)

    def _load(self):
        if not self._save_path.exists():
            return
        try:
            data = json.loads(self._save_path.read_text())
        except (json.JSONDecodeError, OSError):
            return
        for entry in data.get("runs", []):
            try:
                run = MarketRun.from_dict(entry)
            except (KeyError, TypeError):
                continue
            self._runs[run.id] = run
        if data.get("current") in self._runs:
            self._current_id = data["current"]

    # --- Helpers ---

    def _current(self):
        if self._current_id is None:
            raise LookupError("No active market run")
        run = self._runs.get(self._current_id)
        if run is None:
            raise LookupError("Market run not found")
        return run

    def _item(self, item_id):
        for item in self._current().items:
            if item.id == item_id:
                return item
        raise LookupError("Item not found")

    def _default_title(self):
        return f"Market Run - {self._today().strftime('%x')}"

    # --- MarketStore ---

    async def create_run(self, title, budget=None, scheduled_date=None):
        run = MarketRun(
            id=_new_id(),
            title=title,
            date=self._today().strftime("%x"),
            budget=budget,
            scheduled_date=scheduled_date,
        )
        self._runs[run.id] = run
        self._current_id = run.id
        self._save()
        return run.id

    async def add_item(self, item):
        unknown = set(item) - _ITEM_FIELDS
        if unknown:
            raise ValueError(f"Unknown item fields: {', '.join(sorted(unknown))}")
        if self._current_id is None:
            await self.create_run(self._default_title())
        new_item = MarketItem(id=_new_id(), **item)
        self._current().items.append(new_item)
        self._save()
        return new_item.id

    async def update_item(self, item_id, updates):
        unknown = set(updates) - _ITEM_FIELDS
        if unknown:
            raise ValueError(f"Unknown item fields: {', '.join(sorted(unknown))}")
        item = self._item(item_id)
        for key, value in updates.items():
            setattr(item, key, value)
        self._save()

    async def remove_item(self, item_id):
        run = self._current()
        item = self._item(item_id)
        run.items.remove(item)
        self._save()

    async def update_run(self, updates):
        unknown = set(updates) - _RUN_UPDATABLE
        if unknown:
            raise ValueError(f"Unknown run fields: {', '.join(sorted(unknown))}")
        if "status" in updates and updates["status"] not in RUN_STATUSES:
            raise ValueError(f"Bad run status: {updates['status']}")
        run = self._current()
        for key, value in updates.items():
            setattr(run, key, value)
        self._save()

    async def complete_run(self, run_id):
        run = self._runs.get(run_id)
        if run is None:
            raise LookupError("Market run not found")
        run.status = "completed"
        if self._current_id == run_id:
            self._current_id = None
        self._save()

    async def get_current_run(self):
        if self._current_id is None:
            return None
        run = self._runs.get(self._current_id)
        return copy.deepcopy(run)

    def runs(self):
        """All runs, oldest first (snapshot)."""
        return copy.deepcopy(list(self._runs.values()))
