"""Fluent construction of AvaTax transactions."""

from avatax.builder.lines import LineCollection
from avatax.builder.transaction import TransactionBuilder

__all__ = ["LineCollection", "TransactionBuilder"]
