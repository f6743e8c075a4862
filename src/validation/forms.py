"""
Form Validation

DESIGN DECISION: Forms are validated before anything reaches the auth
provider or the document store. Each check appends a ValidationIssue; the
screen shows the first error as a blocking alert.

IMPORTANT: Validation NEVER silently fixes issues in transaction forms.
The budget form is the exception: a blank or unreadable amount counts as
zero, which is what users expect when leaving a category empty.
"""

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Optional

from src.config import get_settings
from src.models.budget import Budget, BudgetMode
from src.models.transaction import EXPENSE_CATEGORIES, LabelOption
from src.models.validation import ValidationIssue, ValidationResult


CENT = Decimal("0.01")


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse a user-typed amount.

    Returns None for blank or non-numeric input. Currency symbols and
    thousands separators are accepted; the result is rounded to cents.
    """
    if text is None:
        return None
    cleaned = str(text).strip().replace(",", "").lstrip("$").strip()
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    try:
        return value.quantize(CENT)
    except InvalidOperation:
        # More digits than the decimal context can hold
        return None


def _budget_amount(text: Optional[str]) -> Decimal:
    """Budget fields: invalid, blank and negative all count as zero."""
    value = parse_amount(text)
    if value is None or value < 0:
        return Decimal("0.00")
    return value


class FormValidator:
    """Validates the sign-in, sign-up, transaction and budget forms."""

    def __init__(self, min_password_length: Optional[int] = None):
        if min_password_length is None:
            min_password_length = get_settings().app.min_password_length
        self._min_password_length = min_password_length

    @staticmethod
    def _check_email(email: str, issues: list[ValidationIssue]) -> None:
        if not email.strip():
            issues.append(ValidationIssue(
                field="email",
                issue_type="missing",
                message="Please enter your email",
            ))
        elif "@" not in email:
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Please enter a valid email address",
            ))

    def validate_sign_in(self, email: str, password: str) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._check_email(email, issues)
        if not password:
            issues.append(ValidationIssue(
                field="password",
                issue_type="missing",
                message="Please enter your password",
            ))
        return ValidationResult(form="sign_in", issues=issues)

    def validate_sign_up(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> ValidationResult:
        """
        Check the sign-up form.

        Order matters: the first issue is the one shown, and it follows the
        order of the fields on screen.
        """
        issues: list[ValidationIssue] = []
        if not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Please enter your name",
            ))
        self._check_email(email, issues)
        if len(password) < self._min_password_length:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_short",
                message=f"Password must be at least {self._min_password_length} characters long",
            ))
        if password != confirm_password:
            issues.append(ValidationIssue(
                field="confirm_password",
                issue_type="mismatch",
                message="Passwords do not match",
            ))
        return ValidationResult(form="sign_up", issues=issues)

    def validate_transaction(
        self,
        form: str,
        description: str,
        amount_text: str,
        label: str,
    ) -> ValidationResult:
        """
        Check an expense or income form.

        Args:
            form: "expense" or "income"
            description: Free-text description (required)
            amount_text: The amount as typed
            label: Selected category or source
        """
        issues: list[ValidationIssue] = []
        if not description.strip() or not str(amount_text or "").strip():
            issues.append(ValidationIssue(
                field="description" if not description.strip() else "amount",
                issue_type="missing",
                message="Please fill in all fields",
            ))
            return ValidationResult(form=form, issues=issues)

        amount = parse_amount(amount_text)
        if amount is None or amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Please enter a valid amount",
            ))

        if not label.strip():
            issues.append(ValidationIssue(
                field="category" if form == "expense" else "source",
                issue_type="missing",
                message="Please fill in all fields",
            ))
        return ValidationResult(form=form, issues=issues)


def build_budget(
    user_id: str,
    month: str,
    mode: BudgetMode,
    total_text: Optional[str] = None,
    category_texts: Optional[Mapping[str, str]] = None,
    categories: Sequence[LabelOption] = EXPENSE_CATEGORIES,
) -> Budget:
    """
    Turn the budget form into a Budget.

    CATEGORY mode: total is the sum of the category amounts.
    TOTAL mode: total is the typed total; every category is set to zero.
    """
    category_texts = category_texts or {}

    if mode == BudgetMode.TOTAL:
        category_budgets = {option.name: Decimal("0.00") for option in categories}
        total = _budget_amount(total_text)
    else:
        category_budgets = {
            option.name: _budget_amount(category_texts.get(option.name))
            for option in categories
        }
        total = sum(category_budgets.values(), Decimal("0.00"))

    return Budget(
        user_id=user_id,
        month=month,
        total_budget=total,
        category_budgets=category_budgets,
        budget_mode=mode,
    )
