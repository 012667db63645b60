"""
repositories/query_template.py
------------------------------
Fixed SQL templates and the per-backend catalogs built from them.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class QueryTemplate:
    """
    SQL text with positional placeholders.

    Attributes:
        sql: The statement. Never built from caller input.
        binds: Argument name bound to each placeholder, in order.
               A name may repeat when the statement uses the value twice.
    """
    sql: str
    binds: tuple[str, ...] = ()

    def bind(self, **arguments: Any) -> tuple:
        """
        Order the given arguments to match the placeholders.

        Raises:
            TypeError: If an argument named by ``binds`` is missing.
        """
        missing = [name for name in self.binds if name not in arguments]
        if missing:
            raise TypeError(f"Missing query argument(s): {', '.join(sorted(set(missing)))}")
        return tuple(arguments[name] for name in self.binds)


@dataclass(frozen=True)
class SqlDialect:
    """The complete query catalog for one backend."""
    name: str
    placeholder: str
    deposits: QueryTemplate
    withdrawals: QueryTemplate
    total_deposit: QueryTemplate
    total_withdrawal: QueryTemplate
    total_interest: QueryTemplate
    interest_rate: QueryTemplate
    savings_details: QueryTemplate
    interest_payments: QueryTemplate
