"""
repositories/hafsql_queries.py
------------------------------
Query catalog for the HAF SQL (PostgreSQL) backend.
Placeholders use psycopg2's positional ``%s`` style.
"""

from repositories.query_template import QueryTemplate, SqlDialect

DEPOSITS = QueryTemplate(
    sql="""
        SELECT *, hafsql.get_timestamp(id) AS timestamp
        FROM hafsql.operation_transfer_to_savings_table
        WHERE (from_account = %s OR to_account = %s)
          AND symbol = 'HBD'
        ORDER BY timestamp ASC;
    """,
    binds=("account", "account"),
)

WITHDRAWALS = QueryTemplate(
    sql="""
        SELECT *, hafsql.get_timestamp(id) AS timestamp
        FROM hafsql.operation_fill_transfer_from_savings_table
        WHERE from_account = %s
          AND symbol = 'HBD'
        ORDER BY timestamp ASC;
    """,
    binds=("account",),
)

TOTAL_DEPOSIT = QueryTemplate(
    sql="""
        SELECT SUM(amount) AS total_amount
        FROM hafsql.operation_transfer_to_savings_table
        WHERE (from_account = %s OR to_account = %s)
          AND symbol = 'HBD';
    """,
    binds=("account", "account"),
)

TOTAL_WITHDRAWAL = QueryTemplate(
    sql="""
        SELECT SUM(amount) AS total_amount
        FROM hafsql.operation_fill_transfer_from_savings_table
        WHERE from_account = %s
          AND symbol = 'HBD';
    """,
    binds=("account",),
)

TOTAL_INTEREST = QueryTemplate(
    sql="""
        SELECT SUM(interest) AS total_interest
        FROM hafsql.operation_interest_table
        WHERE owner = %s;
    """,
    binds=("account",),
)

# hbd_interest_rate is stored in basis points; 1500 -> 15.00 (%).
INTEREST_RATE = QueryTemplate(
    sql="""
        SELECT ROUND(CAST(hbd_interest_rate AS numeric) / 100, 2) AS hbd_interest
        FROM hafsql.dynamic_global_properties
        ORDER BY timestamp DESC
        LIMIT 1;
    """,
)

SAVINGS_DETAILS = QueryTemplate(
    sql="""
        WITH
        last_payment AS (
            SELECT hafsql.get_timestamp(id) AS last_payment_timestamp
            FROM hafsql.operation_interest_table
            WHERE owner = %s
            ORDER BY last_payment_timestamp DESC
            LIMIT 1
        ),
        interest_rate AS (
            SELECT ROUND(CAST(hbd_interest_rate AS numeric) / 100, 2) AS hbd_interest
            FROM hafsql.dynamic_global_properties
            ORDER BY timestamp DESC
            LIMIT 1
        )
        SELECT
            hbd,
            hbd_savings,
            (SELECT last_payment_timestamp FROM last_payment) AS last_payment_date,
            EXTRACT(DAY FROM (NOW() - (SELECT last_payment_timestamp FROM last_payment)))
                AS last_payment_days,
            ROUND(((hbd_savings * (SELECT hbd_interest FROM interest_rate) / 12.0) / 30.0)
                  * EXTRACT(DAY FROM (NOW() - (SELECT last_payment_timestamp FROM last_payment)))
                  / 100, 2) AS estimated_interest
        FROM hafsql.balances
        WHERE account_name = %s;
    """,
    binds=("account", "account"),
)

INTEREST_PAYMENTS = QueryTemplate(
    sql="""
        SELECT *, hafsql.get_timestamp(id) AS timestamp
        FROM hafsql.operation_interest_table
        WHERE owner = %s
        ORDER BY timestamp ASC;
    """,
    binds=("account",),
)

HAFSQL_DIALECT = SqlDialect(
    name="hafsql",
    placeholder="%s",
    deposits=DEPOSITS,
    withdrawals=WITHDRAWALS,
    total_deposit=TOTAL_DEPOSIT,
    total_withdrawal=TOTAL_WITHDRAWAL,
    total_interest=TOTAL_INTEREST,
    interest_rate=INTEREST_RATE,
    savings_details=SAVINGS_DETAILS,
    interest_payments=INTEREST_PAYMENTS,
)
