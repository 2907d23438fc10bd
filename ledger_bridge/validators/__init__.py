"""Validation modules."""
from .balance_validator import BalanceValidator, ValidationResult

__all__ = ['BalanceValidator', 'ValidationResult']
