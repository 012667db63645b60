"""
repositories/hivesql_queries.py
-------------------------------
Query catalog for the HiveSQL (SQL Server) backend.
Placeholders use pyodbc's positional ``?`` style. Columns are aliased to
the HAF SQL names so rows look the same whichever backend served them.
"""

from repositories.query_template import QueryTemplate, SqlDialect

DEPOSITS = QueryTemplate(
    sql="""
        SELECT tx_id AS id, [type], [from] AS from_account, [to] AS to_account,
               [amount], [amount_symbol] AS symbol, [memo], [timestamp]
        FROM TxTransfers
        WHERE ([from] = ? OR [to] = ?)
          AND [type] = 'transfer_to_savings'
          AND [amount_symbol] = 'HBD'
        ORDER BY [timestamp] ASC;
    """,
    binds=("account", "account"),
)

WITHDRAWALS = QueryTemplate(
    sql="""
        SELECT ID AS id, [from] AS from_account, [to] AS to_account, request_id,
               [amount], [amount_symbol] AS symbol, [memo], [timestamp]
        FROM VOFillTransferFromSavings
        WHERE ([from] = ? OR [to] = ?)
          AND [amount_symbol] = 'HBD'
        ORDER BY [timestamp] ASC;
    """,
    binds=("account", "account"),
)

TOTAL_DEPOSIT = QueryTemplate(
    sql="""
        SELECT SUM([amount]) AS total_amount
        FROM TxTransfers
        WHERE ([from] = ? OR [to] = ?)
          AND [type] = 'transfer_to_savings'
          AND [amount_symbol] = 'HBD';
    """,
    binds=("account", "account"),
)

TOTAL_WITHDRAWAL = QueryTemplate(
    sql="""
        SELECT SUM([amount]) AS total_amount
        FROM VOFillTransferFromSavings
        WHERE ([from] = ? OR [to] = ?)
          AND [amount_symbol] = 'HBD';
    """,
    binds=("account", "account"),
)

TOTAL_INTEREST = QueryTemplate(
    sql="""
        SELECT SUM([interest]) AS total_interest
        FROM VOInterests
        WHERE [owner] = ?;
    """,
    binds=("account",),
)

INTEREST_RATE = QueryTemplate(
    sql="""
        SELECT hbd_interest_rate / 100 AS hbd_interest
        FROM DynamicGlobalProperties;
    """,
)

SAVINGS_DETAILS = QueryTemplate(
    sql="""
        SELECT
            hbd_balance AS hbd,
            savings_hbd_balance AS hbd_savings,
            savings_hbd_last_interest_payment AS last_payment_date,
            DATEDIFF(day, savings_hbd_last_interest_payment, GETDATE()) AS last_payment_days,
            ((savings_hbd_balance *
              (SELECT CAST(hbd_interest_rate AS FLOAT) / 100.0 FROM DynamicGlobalProperties)
            / 12.0) / 30.0) *
            DATEDIFF(day, savings_hbd_last_interest_payment, GETDATE()) / 100 AS estimated_interest
        FROM Accounts
        WHERE name = ?;
    """,
    binds=("account",),
)

INTEREST_PAYMENTS = QueryTemplate(
    sql="""
        SELECT ID AS id, [owner], [interest], [interest_symbol],
               is_saved_into_hbd_balance, [timestamp]
        FROM VOInterests
        WHERE [owner] = ?
        ORDER BY [timestamp] ASC;
    """,
    binds=("account",),
)

HIVESQL_DIALECT = SqlDialect(
    name="hivesql",
    placeholder="?",
    deposits=DEPOSITS,
    withdrawals=WITHDRAWALS,
    total_deposit=TOTAL_DEPOSIT,
    total_withdrawal=TOTAL_WITHDRAWAL,
    total_interest=TOTAL_INTEREST,
    interest_rate=INTEREST_RATE,
    savings_details=SAVINGS_DETAILS,
    interest_payments=INTEREST_PAYMENTS,
)
