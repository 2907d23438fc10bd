"""
Balance validation and reconciliation.

Checks that a decoded statement is arithmetically consistent before it is
passed on in another format.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple

from ..config.settings import BALANCE_TOLERANCE
from ..models import Statement

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of balance validation."""
    success: bool
    message: str
    expected_balance: Optional[float] = None
    actual_balance: Optional[float] = None
    difference: Optional[float] = None


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


class BalanceValidator:
    """
    Reconcile opening and closing balances with the transaction totals.

    Signed balances are used: a Debit indicator makes a balance negative.
    """

    def __init__(self, tolerance: float = BALANCE_TOLERANCE):
        """
        Initialize validator.

        Args:
            tolerance: Maximum allowed difference (default: 0.01)
        """
        self.tolerance = tolerance

    def validate_statement_totals(self, statement: Statement) -> ValidationResult:
        """
        Validate statement opening/closing balances match transactions.

        Checks:
        signed_opening + sum(credits) - sum(debits) = signed_closing

        Args:
            statement: Statement to check

        Returns:
            ValidationResult with success status and details
        """
        logger.info(f"Validating statement totals for {statement.account_number}")

        opening = statement.signed_opening_balance
        closing = statement.signed_closing_balance
        total_in = statement.total_credits
        total_out = statement.total_debits
        currency = statement.currency

        calculated_closing = opening + total_in - total_out
        difference = abs(calculated_closing - closing)

        if difference > self.tolerance:
            error_msg = (
                f"Statement balance mismatch: "
                f"Opening {opening:.2f} + "
                f"In {total_in:.2f} - Out {total_out:.2f} = "
                f"{calculated_closing:.2f} {currency}, "
                f"but statement shows closing balance of {closing:.2f} {currency}. "
                f"Difference: {difference:.2f}"
            )
            logger.error(error_msg)

            return ValidationResult(
                success=False,
                message=error_msg,
                expected_balance=calculated_closing,
                actual_balance=closing,
                difference=difference
            )

        success_msg = (
            f"Statement totals reconciled: "
            f"{opening:.2f} + {total_in:.2f} - "
            f"{total_out:.2f} = {closing:.2f} {currency}"
        )
        logger.info(success_msg)

        return ValidationResult(
            success=True,
            message=success_msg,
            expected_balance=calculated_closing,
            actual_balance=closing,
            difference=difference
        )

    def validate_dates(self, statement: Statement) -> List[str]:
        """
        Check booking dates against the statement period.

        Args:
            statement: Statement to check

        Returns:
            List of warning messages (empty when every date is in range)
        """
        warnings = []
        start = _as_date(statement.opening_date)
        end = _as_date(statement.closing_date)

        if start > end:
            warnings.append(
                f"Opening date {start.isoformat()} is after closing date {end.isoformat()}"
            )
            return warnings

        for i, txn in enumerate(statement.transactions, start=1):
            booked = _as_date(txn.booking_date)
            if booked < start or booked > end:
                warnings.append(
                    f"Transaction {i} booked on {booked.isoformat()} is outside "
                    f"the statement period {start.isoformat()} to {end.isoformat()}"
                )

        for warning in warnings:
            logger.warning(warning)

        return warnings

    def perform_full_validation(self, statement: Statement) -> Tuple[bool, List[str]]:
        """
        Perform complete validation.

        Validates:
        1. Statement opening/closing totals
        2. Booking dates within the statement period (warnings only)

        Args:
            statement: Statement to check

        Returns:
            Tuple of (success: bool, messages: list[str])
        """
        logger.info("Performing full balance check")

        totals = self.validate_statement_totals(statement)
        messages = [totals.message]
        messages.extend(self.validate_dates(statement))

        if totals.success:
            logger.info("✓ Balance check PASSED")
        else:
            logger.warning("✗ Balance check FAILED")

        return totals.success, messages
