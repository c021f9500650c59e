import math
from dataclasses import dataclass

from .models import Transaction


MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# (label, inclusive upper bound); the last range is open-ended.
PRICE_RANGES = (
    ("0-100", 100),
    ("101-200", 200),
    ("201-300", 300),
    ("301-400", 400),
    ("401-500", 500),
    ("501-600", 600),
    ("601-700", 700),
    ("701-800", 800),
    ("801-900", 900),
    ("901+", math.inf),
)

CHART_LABEL = "Number of Items"
CHART_COLOR = "rgba(75, 192, 192, 0.6)"


@dataclass(frozen=True)
class Statistics:
    total_sales: float
    sold_count: int
    not_sold_count: int


def validate_month(s: str) -> str:
    if s != "" and s not in MONTHS:
        raise ValueError("month must be a full English month name")
    return s


def month_name(txn: Transaction) -> str:
    return MONTHS[txn.date_of_sale.month - 1]


def matches_search(txn: Transaction, search_term: str) -> bool:
    if not search_term:
        return True
    return (
        search_term in txn.title.lower() or search_term in txn.description.lower()
    )


def matches_month(txn: Transaction, month: str) -> bool:
    return month == "" or month_name(txn) == month


def filter_transactions(
    transactions, search_term: str, month: str
) -> tuple[Transaction, ...]:
    return tuple(
        txn
        for txn in transactions
        if matches_search(txn, search_term) and matches_month(txn, month)
    )


def compute_statistics(transactions) -> Statistics:
    sold = [txn for txn in transactions if txn.sold]
    return Statistics(
        total_sales=sum(txn.price for txn in sold),
        sold_count=len(sold),
        not_sold_count=len(transactions) - len(sold),
    )


def price_bucket(price: float) -> str:
    for label, upper in PRICE_RANGES:
        if price <= upper:
            return label
    return PRICE_RANGES[-1][0]


def bucket_prices(transactions) -> dict[str, int]:
    buckets = {label: 0 for label, _ in PRICE_RANGES}
    for txn in transactions:
        buckets[price_bucket(txn.price)] += 1
    return buckets


def chart_data(buckets: dict[str, int]) -> dict:
    return {
        "labels": list(buckets),
        "datasets": [
            {
                "label": CHART_LABEL,
                "data": list(buckets.values()),
                "backgroundColor": CHART_COLOR,
            }
        ],
    }


def total_pages(item_count: int, page_size: int) -> int:
    return math.ceil(item_count / page_size)


def clamp_page(page: int, item_count: int, page_size: int) -> int:
    last = max(total_pages(item_count, page_size), 1)
    return min(max(page, 1), last)


def paginate(items, page: int, page_size: int) -> tuple:
    start = (page - 1) * page_size
    return tuple(items[start : start + page_size])


def format_money(amount: float) -> str:
    return f"{amount:.2f}"
