"""Immutable view state for the dashboard and the reducer that drives it.

Every operation returns a new ViewState. ``filtered``, ``statistics`` and
``price_buckets`` are only ever produced together by ``_recompute`` so they
always describe the same (dataset, search term, month) triple.
"""

from dataclasses import dataclass, field, replace

from .logic import (
    Statistics,
    bucket_prices,
    clamp_page,
    compute_statistics,
    filter_transactions,
    paginate,
    total_pages as _total_pages,
    validate_month,
)
from .models import Transaction


DEFAULT_PAGE_SIZE = 5


@dataclass(frozen=True)
class ViewState:
    transactions: tuple[Transaction, ...] = ()
    search_term: str = ""
    selected_month: str = ""
    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    filtered: tuple[Transaction, ...] = ()
    statistics: Statistics = Statistics(total_sales=0, sold_count=0, not_sold_count=0)
    price_buckets: dict[str, int] = field(default_factory=lambda: bucket_prices(()))


@dataclass(frozen=True)
class Load:
    transactions: tuple[Transaction, ...]


@dataclass(frozen=True)
class SetSearchTerm:
    text: str


@dataclass(frozen=True)
class SetMonth:
    month: str


@dataclass(frozen=True)
class SetPage:
    page: int


def initial_state(page_size: int = DEFAULT_PAGE_SIZE) -> ViewState:
    if page_size < 1:
        raise ValueError("page size must be at least 1")
    return ViewState(page_size=page_size)


def _recompute(state: ViewState, **changes) -> ViewState:
    state = replace(state, **changes)
    filtered = filter_transactions(
        state.transactions, state.search_term, state.selected_month
    )
    return replace(
        state,
        filtered=filtered,
        statistics=compute_statistics(filtered),
        price_buckets=bucket_prices(filtered),
        current_page=1,
    )


def load(state: ViewState, transactions) -> ViewState:
    return _recompute(state, transactions=tuple(transactions))


def set_search_term(state: ViewState, text: str) -> ViewState:
    return _recompute(state, search_term=text.lower())


def set_month(state: ViewState, month: str) -> ViewState:
    return _recompute(state, selected_month=validate_month(month))


def set_page(state: ViewState, page: int) -> ViewState:
    return replace(
        state,
        current_page=clamp_page(page, len(state.filtered), state.page_size),
    )


def total_pages(state: ViewState) -> int:
    return _total_pages(len(state.filtered), state.page_size)


def current_page_items(state: ViewState) -> tuple[Transaction, ...]:
    return paginate(state.filtered, state.current_page, state.page_size)


def reduce(state: ViewState, action) -> ViewState:
    if isinstance(action, Load):
        return load(state, action.transactions)
    if isinstance(action, SetSearchTerm):
        return set_search_term(state, action.text)
    if isinstance(action, SetMonth):
        return set_month(state, action.month)
    if isinstance(action, SetPage):
        return set_page(state, action.page)
    raise TypeError(f"unknown action: {action!r}")


def build_view(
    transactions,
    *,
    search_term: str = "",
    month: str = "",
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ViewState:
    """Replay the dashboard's inputs over a fresh state."""
    state = initial_state(page_size)
    for action in (
        Load(tuple(transactions)),
        SetSearchTerm(search_term),
        SetMonth(month),
        SetPage(page),
    ):
        state = reduce(state, action)
    return state
