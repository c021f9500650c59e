import csv
import logging
from io import StringIO
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .logic import MONTHS, chart_data, format_money
from .models import parse_transactions
from .proxy import DatasetFetchError, fetch_dataset
from .settings import get_settings
from .state import ViewState, build_view, current_page_items, total_pages


logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

settings = get_settings()

app = FastAPI(title="Sales Transaction Dashboard")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
templates = Jinja2Templates(directory=BASE_DIR / "templates")
templates.env.filters["money"] = format_money

app.state.transactions = None


def _load_transactions():
    """Return the dataset, fetching it on first use.

    A failed fetch is not remembered so the next page view retries.
    """
    if app.state.transactions is not None:
        return app.state.transactions
    try:
        raw = fetch_dataset(
            settings.upstream_url, timeout=settings.upstream_timeout
        )
        transactions = tuple(parse_transactions(raw))
    except (DatasetFetchError, ValueError) as exc:
        logger.error("Dashboard dataset unavailable: %s", exc)
        return ()
    logger.info("Loaded %s transactions", len(transactions))
    app.state.transactions = transactions
    return transactions


def _resolve_view(q: str, month: str, page: int) -> ViewState:
    try:
        return build_view(
            _load_transactions(),
            search_term=q,
            month=month,
            page=page,
            page_size=settings.page_size,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _build_context(request: Request, view: ViewState) -> dict:
    return {
        "request": request,
        "view": view,
        "items": current_page_items(view),
        "total_pages": total_pages(view),
        "months": MONTHS,
        "chart": chart_data(view.price_buckets),
    }


def _render_partial(request: Request, view: ViewState) -> HTMLResponse:
    context = _build_context(request, view)
    return HTMLResponse(templates.get_template("_dashboard.html").render(**context))


@app.get("/api/getdata")
def get_data():
    try:
        return fetch_dataset(settings.upstream_url, timeout=settings.upstream_timeout)
    except DatasetFetchError as exc:
        logger.exception("Proxy request failed")
        return JSONResponse(
            status_code=500,
            content={"message": "Error fetching data", "error": str(exc)},
        )


@app.get("/", response_class=HTMLResponse)
def index(request: Request, q: str = "", month: str = "", page: int = 1):
    view = _resolve_view(q, month, page)
    if request.headers.get("HX-Request") == "true":
        return _render_partial(request, view)
    return templates.TemplateResponse(
        request, "index.html", _build_context(request, view)
    )


@app.get("/partials/dashboard", response_class=HTMLResponse)
def dashboard_partial(request: Request, q: str = "", month: str = "", page: int = 1):
    return _render_partial(request, _resolve_view(q, month, page))


@app.get("/api/view")
def view_json(q: str = "", month: str = "", page: int = 1):
    view = _resolve_view(q, month, page)
    return {
        "search_term": view.search_term,
        "selected_month": view.selected_month,
        "current_page": view.current_page,
        "total_pages": total_pages(view),
        "page_size": view.page_size,
        "statistics": {
            "total_sales": round(view.statistics.total_sales, 2),
            "sold_count": view.statistics.sold_count,
            "not_sold_count": view.statistics.not_sold_count,
        },
        "items": [txn.to_dict() for txn in current_page_items(view)],
        "price_buckets": view.price_buckets,
    }


@app.get("/api/chart")
def chart_json(q: str = "", month: str = ""):
    return chart_data(_resolve_view(q, month, 1).price_buckets)


@app.get("/export.csv")
def export_csv(q: str = "", month: str = ""):
    view = _resolve_view(q, month, 1)

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(
        ["id", "title", "description", "price", "category", "sold", "dateOfSale"]
    )
    for txn in view.filtered:
        writer.writerow(
            [
                txn.id,
                txn.title,
                txn.description,
                format_money(txn.price),
                txn.category,
                "yes" if txn.sold else "no",
                txn.date_of_sale.isoformat(),
            ]
        )

    body = "\ufeff" + output.getvalue()
    filename = f"transactions-{(view.selected_month or 'all').lower()}.csv"
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Server is running on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
