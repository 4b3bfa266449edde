"""
File-backed key/value store that keeps the client's state between sessions.

Keys mirror what a browser client would put in local storage. Each value is
stored as JSON; a value that cannot be decoded or validated is logged and
treated as missing so a damaged file never blocks the app from starting.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel


logger = logging.getLogger(__name__)

STATE_PATH_ENV_VAR = "SPENDWISE_STATE_PATH"
DEFAULT_STATE_PATH = Path.home() / ".spendwise" / "state.json"

THEME_KEY = "theme"
ONBOARDING_KEY = "onboardingComplete"
USER_DATA_KEY = "userData"
EXPENSES_KEY = "expenses"
GOALS_KEY = "savingGoals"
GUIDE_SEEN_KEY = "hasSeenFirstTimeGuide"


class StoredModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


class FixedExpense(StoredModel):
    name: str
    amount: float


class UserData(StoredModel):
    age: int
    country: str
    currency: str
    currency_symbol: str
    income: float
    fixed_expenses: List[FixedExpense] = Field(default_factory=list)
    spending_habits: List[str] = Field(default_factory=list)


class ClientExpense(StoredModel):
    id: str
    amount: float = Field(ge=0)
    category: str
    date: dt.date


class SavingGoal(StoredModel):
    id: str
    name: str
    target_amount: float
    current_amount: float = 0.0
    target_date: dt.date


_EXPENSE_LIST = TypeAdapter(List[ClientExpense])
_GOAL_LIST = TypeAdapter(List[SavingGoal])


def resolve_state_path() -> Path:
    raw_value = os.getenv(STATE_PATH_ENV_VAR)
    if raw_value and raw_value.strip():
        return Path(raw_value.strip()).expanduser()
    return DEFAULT_STATE_PATH


class LocalStateStore:
    """JSON document on disk holding every persisted client key."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or resolve_state_path()
        self._data: Dict[str, Any] = self._read()

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> Any:
        return self._data.get(key)

    def set_item(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._write()

    def remove_item(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._write()

    def load_theme(self) -> str:
        return "dark" if self.get_item(THEME_KEY) == "dark" else "light"

    def save_theme(self, theme: str) -> None:
        self.set_item(THEME_KEY, theme)

    def load_flag(self, key: str) -> bool:
        return self.get_item(key) == "true"

    def save_flag(self, key: str, value: bool) -> None:
        self.set_item(key, "true" if value else "false")

    def load_user_data(self) -> Optional[UserData]:
        raw = self.get_item(USER_DATA_KEY)
        if raw is None:
            return None
        try:
            return UserData.model_validate(raw)
        except ValidationError as exc:
            self._log_invalid(USER_DATA_KEY, exc)
            return None

    def save_user_data(self, user_data: UserData) -> None:
        self.set_item(USER_DATA_KEY, user_data.model_dump(mode="json", by_alias=True))

    def load_expenses(self) -> List[ClientExpense]:
        raw = self.get_item(EXPENSES_KEY)
        if raw is None:
            return []
        try:
            return _EXPENSE_LIST.validate_python(raw)
        except ValidationError as exc:
            self._log_invalid(EXPENSES_KEY, exc)
            return []

    def save_expenses(self, expenses: List[ClientExpense]) -> None:
        self.set_item(EXPENSES_KEY, _EXPENSE_LIST.dump_python(expenses, mode="json", by_alias=True))

    def load_goals(self) -> List[SavingGoal]:
        raw = self.get_item(GOALS_KEY)
        if raw is None:
            return []
        try:
            return _GOAL_LIST.validate_python(raw)
        except ValidationError as exc:
            self._log_invalid(GOALS_KEY, exc)
            return []

    def save_goals(self, goals: List[SavingGoal]) -> None:
        self.set_item(GOALS_KEY, _GOAL_LIST.dump_python(goals, mode="json", by_alias=True))

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning({"event": "local_state_unreadable", "path": str(self._path), "error": str(exc)})
            return {}
        if not isinstance(data, dict):
            logger.warning({"event": "local_state_unreadable", "path": str(self._path), "error": "not an object"})
            return {}
        return data

    def _write(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)

    def _log_invalid(self, key: str, exc: ValidationError) -> None:
        logger.warning(
            {
                "event": "local_state_invalid",
                "key": key,
                "path": str(self._path),
                "error_count": exc.error_count(),
            }
        )
