import pandas as pd

from ..data_model import Household, ProjectionResult

REQUIRED_COLUMNS = {"Year", "Phase", "Income", "Taxes", "Spending", "Net worth"}


def _prepare(df: pd.DataFrame) -> pd.DataFrame:
    missing = REQUIRED_COLUMNS.difference(df.columns)
    if missing:
        raise KeyError(f"Missing required columns: {', '.join(sorted(missing))}")
    return df.sort_values("Year").copy()


def projection_to_frame(result: ProjectionResult, household: Household) -> pd.DataFrame:
    """One row per simulated year with a column set per account."""
    labels = [(account.id, account.name or account.id) for account in household.accounts]
    with_withdrawals = result.has_withdrawal_phase
    records = []

    for row in result.rows:
        record = {
            "Year": row.year,
            "Phase": row.phase,
            "Income": row.gross_income,
            "Taxes": row.taxes,
        }
        if with_withdrawals:
            record["Withdrawal taxes"] = row.withdrawal_taxes
        record["Spending"] = row.spending

        for account_id, label in labels:
            record[f"{label} (contrib)"] = row.contributions.get(account_id)
        if with_withdrawals:
            for account_id, label in labels:
                record[f"{label} (withdrawal)"] = row.withdrawals.get(account_id)
        for account_id, label in labels:
            record[f"{label} (growth)"] = row.growth.get(account_id)
        for account_id, label in labels:
            record[f"{label} (end)"] = row.ending_balances.get(account_id)

        record["Unallocated surplus"] = row.unallocated_surplus
        record["Net worth"] = row.net_worth
        record["Invested"] = row.invested_assets
        records.append(record)

    return pd.DataFrame(records)


def summarize_by_phase(df: pd.DataFrame) -> pd.DataFrame:
    """Collapse a year table into one row per phase, in the order phases occur."""
    if df.empty:
        return df

    df = _prepare(df)
    summary = df.groupby("Phase", sort=False).agg(
        StartYear=("Year", "min"),
        EndYear=("Year", "max"),
        Years=("Year", "count"),
        Income=("Income", "sum"),
        Taxes=("Taxes", "sum"),
        Spending=("Spending", "sum"),
        EndingNetWorth=("Net worth", "last"),
    )
    return summary.reset_index()
