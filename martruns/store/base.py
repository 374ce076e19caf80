"""Market-run records and the store interface the dispatcher mutates through.

The real app keeps runs in a remote document database. The core only needs
the operations below, so anything that implements MarketStore can back it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from typing import List, Optional

RUN_STATUSES = ("planning", "shopping", "completed")


@dataclass
class MarketItem:
    id: str
    name: str
    category: str = "other"
    completed: bool = False
    estimated_price: Optional[float] = None
    actual_price: Optional[float] = None
    note: Optional[str] = None


@dataclass
class MarketRun:
    id: str
    title: str
    date: str = ""
    items: List[MarketItem] = field(default_factory=list)
    status: str = "planning"
    budget: Optional[float] = None
    scheduled_date: Optional[str] = None

    @property
    def total_estimated(self):
        return sum(i.estimated_price or 0 for i in self.items)

    @property
    def total_spent(self):
        """Actual prices where known, estimates otherwise."""
        return sum(i.actual_price or i.estimated_price or 0 for i in self.items)

    @property
    def completed_items(self):
        return sum(1 for i in self.items if i.completed)

    @property
    def total_items(self):
        return len(self.items)

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        data = dict(data)
        data["items"] = [MarketItem(**i) for i in data.get("items", [])]
        return cls(**data)


class MarketStore(ABC):
    """Mutation and read operations on the user's market runs."""

    @abstractmethod
    async def create_run(self, title, budget=None, scheduled_date=None):
        """Create a run, make it current, and return its id."""

    @abstractmethod
    async def add_item(self, item):
        """Add an item (dict of MarketItem fields, no id) to the current run."""

    @abstractmethod
    async def update_item(self, item_id, updates):
        """Apply a partial update to an item of the current run."""

    @abstractmethod
    async def remove_item(self, item_id):
        """Remove an item from the current run."""

    @abstractmethod
    async def update_run(self, updates):
        """Apply a partial update to the current run."""

    @abstractmethod
    async def complete_run(self, run_id):
        """Mark a run completed."""

    @abstractmethod
    async def get_current_run(self):
        """Return a snapshot of the current run, or None."""
