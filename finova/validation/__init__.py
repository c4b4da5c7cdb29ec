"""Form validation package."""

from finova.validation.validator import FormValidator

__all__ = ["FormValidator"]
