"""
Cross-format statement conversion.

Every field is copied unchanged; only the date representation follows the
target model (plain dates for CSV, UTC-midnight datetimes otherwise).
"""
from typing import Type, TypeVar

from .models import Camt053Statement, CsvStatement, Mt940Statement, Statement

S = TypeVar("S", bound=Statement)


def convert_statement(statement: Statement, target_cls: Type[S]) -> S:
    """
    Convert a statement into another format model.

    Args:
        statement: Source statement (any model)
        target_cls: Target model class

    Returns:
        New statement of target_cls (the same object if already that type)
    """
    return target_cls.from_statement(statement)


def to_csv(statement: Statement) -> CsvStatement:
    return convert_statement(statement, CsvStatement)


def to_mt940(statement: Statement) -> Mt940Statement:
    return convert_statement(statement, Mt940Statement)


def to_camt053(statement: Statement) -> Camt053Statement:
    return convert_statement(statement, Camt053Statement)
