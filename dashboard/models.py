import logging
import math
from dataclasses import dataclass
from datetime import datetime


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transaction:
    id: int
    title: str
    description: str
    price: float
    category: str
    sold: bool
    date_of_sale: datetime
    image: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "sold": self.sold,
            "dateOfSale": self.date_of_sale.isoformat(),
            "image": self.image,
        }


def _parse_date_of_sale(value) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("dateOfSale required")
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise ValueError("dateOfSale invalid") from e


def parse_transaction(raw) -> Transaction:
    """Build a Transaction from one record of the upstream JSON array.

    Raises ValueError when the record is missing a field the dashboard
    filters or aggregates on.
    """
    if not isinstance(raw, dict):
        raise ValueError("record must be an object")

    txn_id = raw.get("id")
    if isinstance(txn_id, bool) or not isinstance(txn_id, int):
        raise ValueError("id must be an integer")

    title = raw.get("title")
    description = raw.get("description")
    if not isinstance(title, str) or not isinstance(description, str):
        raise ValueError("title and description must be text")

    price = raw.get("price")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValueError("price must be a number")
    if not math.isfinite(price):
        raise ValueError("price must be a finite number")
    if price < 0:
        raise ValueError("price must be non-negative")

    sold = raw.get("sold")
    if not isinstance(sold, bool):
        raise ValueError("sold must be a boolean")

    image = raw.get("image")
    return Transaction(
        id=txn_id,
        title=title,
        description=description,
        price=price,
        category=str(raw.get("category") or ""),
        sold=sold,
        date_of_sale=_parse_date_of_sale(raw.get("dateOfSale")),
        image=image if isinstance(image, str) and image else None,
    )


def parse_transactions(records) -> list[Transaction]:
    if not isinstance(records, list):
        raise ValueError("dataset must be a JSON array")

    transactions = []
    for index, raw in enumerate(records):
        try:
            transactions.append(parse_transaction(raw))
        except ValueError as exc:
            logger.warning("dropping malformed record index=%s reason=%s", index, exc)
    return transactions
