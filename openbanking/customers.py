"""
Customer Reference Module

Customers are managed outside this core. Accounts and cards only carry an
opaque reference: an identifier plus a display name.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Customer:
    """Opaque customer reference supplied by the customer provider"""
    customer_id: str
    name: str

    def __post_init__(self):
        if not self.customer_id:
            raise ValueError("Customer ID is required")

    def __str__(self) -> str:
        return self.name
