"""Expense form package."""

from src.forms.controller import FormController

__all__ = ["FormController"]
