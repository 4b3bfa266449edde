"""
Expense API stores users, expenses, and budgets and serves the spending
analytics (trends, category breakdown, budget status) computed by the shared
aggregation engine.
"""

import logging
import sys
import time
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

SRC_DIR = Path(__file__).resolve().parent
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

SERVICES_ROOT = SRC_DIR.parents[1]
if str(SERVICES_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICES_ROOT))

from auth import AuthenticationError, authenticate_request, create_access_token, hash_password, verify_password
from middleware.rate_limit import SimpleRateLimiter, build_rate_limiter, is_rate_limited_path
from persistence.database import get_session, init_db
from persistence.models import User
from persistence.repository import BudgetRepository, ExpenseRepository, UserRepository
from schemas import (
    AuthResponse,
    BudgetListResponse,
    BudgetModel,
    BudgetMutationResponse,
    BudgetPayload,
    BudgetStatusModel,
    BudgetStatusResponse,
    BulkExpensesPayload,
    BulkExpensesResponse,
    CategoryBreakdownModel,
    CurrentUserResponse,
    ExpenseListResponse,
    ExpenseModel,
    ExpenseMutationResponse,
    ExpensePayload,
    ExpenseUpdatePayload,
    LoginPayload,
    MessageResponse,
    RegisterPayload,
    TrendReportModel,
    UserModel,
)
from settings import ApiSettings, load_api_settings
from shared.analytics import compute_category_breakdown, compute_trend_report, evaluate_budgets
from shared.categories import TOTAL_BUDGET_CATEGORY, parse_category, reconcile_category
from shared.observability.privacy import hash_email
from shared.observability.telemetry import (
    bind_request_context,
    ensure_request_id,
    reset_request_context,
    setup_telemetry,
)

SERVICE_NAME = "expense-api"
MIN_PASSWORD_LENGTH = 6
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}

logger = logging.getLogger(__name__)

settings = load_api_settings()

app = FastAPI(title="SpendWise Expense API")
setup_telemetry(app, service_name=SERVICE_NAME)
app.state.settings = settings
app.state.rate_limiter = build_rate_limiter(settings.rate_limit_per_window, settings.rate_limit_window_seconds)
app.state.clock = datetime.now


def error_response(status_code: int, error_code: str, details: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error_code, "details": details},
    )


def _client_ip(request: Request) -> str | None:
    client = request.client
    if client:
        return client.host
    return None


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = ensure_request_id(request)
    token = bind_request_context(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        response.headers.setdefault("x-request-id", request_id)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        logger.info(
            {
                "event": "http_access",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "client_ip": _client_ip(request),
                "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            }
        )
        return response
    finally:
        reset_request_context(token)


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    if not is_rate_limited_path(request.url.path):
        return await call_next(request)

    limiter: SimpleRateLimiter = app.state.rate_limiter
    client_id = _client_ip(request) or "unknown"
    decision = await limiter.check(client_id)
    if decision.allowed:
        response = await call_next(request)
        response.headers.update(decision.headers())
        return response

    logger.warning(
        {
            "event": "rate_limited",
            "request_id": getattr(request.state, "request_id", None),
            "client_ip": client_id,
            "retry_after_seconds": round(decision.retry_after, 1),
        }
    )
    response = error_response(
        429,
        "rate_limit_exceeded",
        "Too many requests. Please retry shortly.",
    )
    response.headers.update(decision.headers())
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials="*" not in settings.cors_origins,
)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    logger.info(
        {
            "event": "authentication_failed",
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "error": exc.error_code,
        }
    )
    return error_response(401, exc.error_code, exc.details)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        {
            "event": "unhandled_error",
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "error": str(exc),
        }
    )
    current_settings: ApiSettings = request.app.state.settings
    details = str(exc) if current_settings.is_development else "Internal server error."
    return error_response(500, "internal_server_error", details)


@app.on_event("startup")
def on_startup() -> None:
    """Initialize persistence before serving requests."""
    init_db()


def get_settings(request: Request) -> ApiSettings:
    return request.app.state.settings


def get_current_user_id(request: Request, current_settings: ApiSettings = Depends(get_settings)) -> str:
    return authenticate_request(request, current_settings)


def get_now(request: Request) -> datetime:
    """Reference instant for analytics; tests swap `app.state.clock`."""
    return request.app.state.clock()


def _user_model(user: User) -> UserModel:
    return UserModel(id=user.id, email=user.email, name=user.name, currency=user.currency)


def _server_category(label: str) -> Optional[str]:
    """Return the stored category value for a label, or None when the API cannot accept it."""
    try:
        category = parse_category(label)
    except ValueError:
        return None
    known = reconcile_category(category)
    return known.value if known is not None else None


def _budget_category(label: str) -> Optional[str]:
    if (label or "").strip() == TOTAL_BUDGET_CATEGORY:
        return TOTAL_BUDGET_CATEGORY
    return _server_category(label)


def _invalid_category_response(label: str) -> JSONResponse:
    return error_response(400, "invalid_category", f"Unsupported category '{label}'.")


@app.get("/api/health")
def health_check() -> dict:
    """Reports API uptime so orchestrators can confirm the service is available."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/api/auth/register", status_code=201, response_model=AuthResponse)
def register(
    payload: RegisterPayload,
    request: Request,
    db: Session = Depends(get_session),
    current_settings: ApiSettings = Depends(get_settings),
) -> AuthResponse | JSONResponse:
    """Creates an account and returns a bearer token for it."""
    email = payload.email.strip().lower()
    name = payload.name.strip()
    if not email or not name or not payload.password:
        return error_response(400, "missing_fields", "Name, email, and password are required.")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        return error_response(
            400,
            "password_too_short",
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
        )

    repo = UserRepository(db)
    if repo.get_by_email(email) is not None:
        return error_response(400, "email_already_registered", "Email already registered.")

    try:
        user = repo.create_user(email=email, password_hash=hash_password(payload.password), name=name)
    except IntegrityError:
        db.rollback()
        return error_response(400, "email_already_registered", "Email already registered.")

    logger.info(
        {
            "event": "user_registered",
            "request_id": ensure_request_id(request),
            "user_id": user.id,
            "email_hash": hash_email(email),
        }
    )
    return AuthResponse(
        message="User registered successfully",
        token=create_access_token(user.id, current_settings),
        user=_user_model(user),
    )


@app.post("/api/auth/login", response_model=AuthResponse)
def login(
    payload: LoginPayload,
    request: Request,
    db: Session = Depends(get_session),
    current_settings: ApiSettings = Depends(get_settings),
) -> AuthResponse | JSONResponse:
    """Exchanges email and password for a bearer token."""
    email = payload.email.strip().lower()
    if not email or not payload.password:
        return error_response(400, "missing_fields", "Email and password are required.")

    user = UserRepository(db).get_by_email(email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info(
            {
                "event": "login_failed",
                "request_id": ensure_request_id(request),
                "email_hash": hash_email(email),
            }
        )
        return error_response(401, "invalid_credentials", "Invalid credentials.")

    return AuthResponse(
        message="Login successful",
        token=create_access_token(user.id, current_settings),
        user=_user_model(user),
    )


@app.get("/api/auth/me", response_model=CurrentUserResponse)
def current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> CurrentUserResponse | JSONResponse:
    user = UserRepository(db).get_user(user_id)
    if user is None:
        return error_response(404, "user_not_found", "User not found.")
    return CurrentUserResponse(user=_user_model(user))


@app.get("/api/expenses", response_model=ExpenseListResponse)
def list_expenses(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    category: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> ExpenseListResponse:
    """Lists the caller's expenses, newest first, optionally filtered by inclusive date range and category."""
    expenses = ExpenseRepository(db).list_expenses(
        user_id,
        start_date=start_date,
        end_date=end_date,
        category=category,
    )
    return ExpenseListResponse(expenses=[ExpenseModel.model_validate(expense) for expense in expenses])


@app.post("/api/expenses", status_code=201, response_model=ExpenseMutationResponse)
def create_expense(
    payload: ExpensePayload,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> ExpenseMutationResponse | JSONResponse:
    if payload.amount <= 0:
        return error_response(400, "invalid_amount", "Amount must be positive.")
    if not payload.description.strip():
        return error_response(400, "missing_fields", "Description is required.")
    category = _server_category(payload.category)
    if category is None:
        return _invalid_category_response(payload.category)

    expense = ExpenseRepository(db).create_expense(
        user_id,
        amount=payload.amount,
        category=category,
        description=payload.description.strip(),
        date=payload.date,
        source=payload.source,
    )
    logger.info(
        {
            "event": "expense_created",
            "request_id": ensure_request_id(request),
            "user_id": user_id,
            "expense_id": expense.id,
            "source": expense.source,
        }
    )
    return ExpenseMutationResponse(
        message="Expense created successfully",
        expense=ExpenseModel.model_validate(expense),
    )


@app.post("/api/expenses/bulk", status_code=201, response_model=BulkExpensesResponse)
def create_expenses_bulk(
    payload: BulkExpensesPayload,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> BulkExpensesResponse | JSONResponse:
    """Stores pre-parsed receipt lines in one transaction; every row is tagged with source "ocr"."""
    if not payload.expenses:
        return error_response(400, "invalid_expenses", "Invalid expenses data.")

    items: list[Dict[str, Any]] = []
    for item in payload.expenses:
        category = _server_category(item.category)
        if category is None:
            return _invalid_category_response(item.category)
        items.append(
            {
                "amount": item.amount,
                "category": category,
                "description": item.description.strip(),
                "date": item.date,
            }
        )

    created = ExpenseRepository(db).bulk_create(user_id, items, source="ocr")
    logger.info(
        {
            "event": "expenses_bulk_created",
            "request_id": ensure_request_id(request),
            "user_id": user_id,
            "count": len(created),
        }
    )
    return BulkExpensesResponse(
        message=f"{len(created)} expenses created successfully",
        expenses=[ExpenseModel.model_validate(expense) for expense in created],
    )


@app.put("/api/expenses/{expense_id}", response_model=ExpenseMutationResponse)
def update_expense(
    expense_id: str,
    payload: ExpenseUpdatePayload,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> ExpenseMutationResponse | JSONResponse:
    changes = payload.model_dump(exclude_none=True)
    if "amount" in changes and changes["amount"] <= 0:
        return error_response(400, "invalid_amount", "Amount must be positive.")
    if "description" in changes:
        changes["description"] = changes["description"].strip()
        if not changes["description"]:
            return error_response(400, "missing_fields", "Description is required.")
    if "category" in changes:
        category = _server_category(changes["category"])
        if category is None:
            return _invalid_category_response(changes["category"])
        changes["category"] = category

    expense = ExpenseRepository(db).update_expense(user_id, expense_id, changes)
    if expense is None:
        return error_response(404, "expense_not_found", "Expense not found.")
    return ExpenseMutationResponse(
        message="Expense updated successfully",
        expense=ExpenseModel.model_validate(expense),
    )


@app.delete("/api/expenses/{expense_id}", response_model=MessageResponse)
def delete_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> MessageResponse | JSONResponse:
    if not ExpenseRepository(db).delete_expense(user_id, expense_id):
        return error_response(404, "expense_not_found", "Expense not found.")
    return MessageResponse(message="Expense deleted successfully")


@app.get("/api/analytics/trends", response_model=TrendReportModel)
def spending_trends(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
    now: datetime = Depends(get_now),
) -> TrendReportModel:
    """Week-over-week and month-over-month spend comparison for the caller."""
    records = ExpenseRepository(db).list_records(user_id)
    report = compute_trend_report(records, now)
    return TrendReportModel.model_validate(report)


@app.get("/api/analytics/categories", response_model=CategoryBreakdownModel)
def category_insights(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> CategoryBreakdownModel:
    """Per-category totals, shares, and largest transactions within an optional inclusive date range."""
    records = ExpenseRepository(db).list_records(user_id)
    breakdown = compute_category_breakdown(records, start_date, end_date)
    return CategoryBreakdownModel.model_validate(breakdown)


@app.get("/api/budgets", response_model=BudgetListResponse)
def list_budgets(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> BudgetListResponse:
    budgets = BudgetRepository(db).list_budgets(user_id)
    return BudgetListResponse(budgets=[BudgetModel.model_validate(budget) for budget in budgets])


@app.post("/api/budgets", response_model=BudgetMutationResponse)
def save_budget(
    payload: BudgetPayload,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> BudgetMutationResponse | JSONResponse:
    """Creates the budget for (category, period) or replaces its limit when one exists."""
    category = _budget_category(payload.category)
    if category is None:
        return _invalid_category_response(payload.category)

    budget, created = BudgetRepository(db).upsert_budget(
        user_id,
        category=category,
        period=payload.period,
        limit=payload.limit,
    )
    logger.info(
        {
            "event": "budget_saved",
            "request_id": ensure_request_id(request),
            "user_id": user_id,
            "budget_id": budget.id,
            "created": created,
        }
    )
    return BudgetMutationResponse(
        message="Budget saved successfully",
        budget=BudgetModel.model_validate(budget),
    )


@app.delete("/api/budgets/{budget_id}", response_model=MessageResponse)
def delete_budget(
    budget_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> MessageResponse | JSONResponse:
    if not BudgetRepository(db).delete_budget(user_id, budget_id):
        return error_response(404, "budget_not_found", "Budget not found.")
    return MessageResponse(message="Budget deleted successfully")


@app.get("/api/budgets/status", response_model=BudgetStatusResponse)
def budget_status(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
    now: datetime = Depends(get_now),
) -> BudgetStatusResponse:
    """Spend-to-date against each budget for its current week or month."""
    budgets = BudgetRepository(db).list_records(user_id)
    records = ExpenseRepository(db).list_records(user_id)
    statuses = evaluate_budgets(budgets, records, now)
    return BudgetStatusResponse(budget_status=[BudgetStatusModel.model_validate(status) for status in statuses])
