from dataclasses import dataclass
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

EXPENSE_CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Other",
)

INCOME_CATEGORIES = (
    "Salary",
    "Freelance",
    "Investment",
    "Business",
    "Gift",
    "Other",
)

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class FinanceError(Exception):
    """Base class for errors raised by the derivation engine."""


class InvalidBudget(FinanceError):
    def __init__(self, budget: "Budget"):
        self.budget = budget
        super().__init__(
            f"Budget {budget.id} for {budget.category!r} has non-positive limit {budget.monthly_limit}"
        )


class MalformedTransaction(FinanceError):
    def __init__(self, transaction_id: str, reason: str):
        self.transaction_id = transaction_id
        self.reason = reason
        super().__init__(f"Transaction {transaction_id}: {reason}")


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float      # real number >= 0, the sign comes from type; Decimal is rejected
    description: str
    date: str          # "2024-01-05"
    type: str          # "income" or "expense"
    category: str = ""  # legacy records have no category


# A monthly spending cap for one expense category
@dataclass(frozen=True)
class Budget:
    id: str
    category: str
    monthly_limit: float
    month: str  # e.g. "2024-01"


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    amount: float
    count: int


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: float
    count: int
    percentage: float


@dataclass(frozen=True, order=True)
class MonthKey:
    year: int
    month: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"


@dataclass(frozen=True)
class MonthBucket:
    month_key: MonthKey
    total: float
    count: int


@dataclass(frozen=True)
class BudgetEvaluation:
    budget: Budget
    spent: float
    remaining: float
    percentage: float
    status: str  # "good", "warning" or "over"


@dataclass(frozen=True)
class BudgetComparison:
    category: str
    budget: float
    spent: float
    remaining: float


@dataclass(frozen=True)
class SpendingInsights:
    current_month: str
    previous_month: str
    current_month_expenses: float
    previous_month_expenses: float
    monthly_change: float
    top_category: Optional[CategoryTotal]
    average_expense: float
    days_since_last: Optional[int]
    budget_warnings: tuple
    flags: frozenset
