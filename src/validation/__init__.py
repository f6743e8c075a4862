"""Form validation package."""

from src.validation.forms import FormValidator, build_budget, parse_amount

__all__ = ["FormValidator", "build_budget", "parse_amount"]
