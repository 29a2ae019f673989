"""
Monitoring Data Models

Card identity, listing observations and price history records.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CardIdentity:
    """
    Unique key of a trackable card.

    Use `CardIdentity.create` for untrusted input: it trims whitespace and
    rejects empty fields.
    """

    name: str
    collection: str
    number: str

    @classmethod
    def create(cls, name, collection, number):
        """
        Build a card identity from raw input.

        Raises:
            ValueError: If any field is empty after trimming
        """
        fields = [str(value or "").strip() for value in (name, collection, number)]
        if not all(fields):
            raise ValueError(
                f"Card identity needs name, collection and number, got {fields!r}"
            )
        return cls(*fields)

    def label(self):
        return f"{self.name} ({self.collection} - {self.number})"


@dataclass
class ListingObservation:
    """The first near-mint listing that reached the cart for one card."""

    card: CardIdentity
    condition: str
    language: str
    quantity: int = 0
    price: float = 0.0
    total_price: float = 0.0

    def to_row(self):
        return {
            "name": self.card.name,
            "collection": self.card.collection,
            "number": self.card.number,
            "condition": self.condition,
            "quantity": str(self.quantity),
            "price": f"{self.price:.2f}",
            "total_price": f"{self.total_price:.2f}",
            "language": self.language,
        }

    def to_dict(self):
        return {
            "name": self.card.name,
            "collection": self.card.collection,
            "number": self.card.number,
            "condition": self.condition,
            "language": self.language,
            "quantity": self.quantity,
            "price": self.price,
            "total_price": self.total_price,
        }


@dataclass
class PriceHistoryRecord:
    """
    Price history of one card.

    The initial price and date are frozen once the initial price is non-zero;
    the current price and date move with every observation.
    """

    card: CardIdentity
    current_price: float
    current_date: str
    initial_price: float
    initial_date: str

    def observe(self, price, observed_at):
        if self.initial_price == 0:
            self.initial_price = price
            self.initial_date = observed_at
        self.current_price = price
        self.current_date = observed_at

    def to_row(self):
        return {
            "name": self.card.name,
            "collection": self.card.collection,
            "number": self.card.number,
            "current_price": f"{self.current_price:.2f}",
            "current_date": self.current_date,
            "initial_price": f"{self.initial_price:.2f}",
            "initial_date": self.initial_date,
        }

    def to_dict(self):
        return {
            "name": self.card.name,
            "collection": self.card.collection,
            "number": self.card.number,
            "current_price": self.current_price,
            "current_date": self.current_date,
            "initial_price": self.initial_price,
            "initial_date": self.initial_date,
        }
