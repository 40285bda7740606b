from fiplanner.data_model import Account, Household, Income, Payroll, Person, Scenario

START_YEAR = 2025


def make_person(
    person_id="p1",
    salary=294000.0,
    birth_year=None,
    growth_rate=0.0,
    growth_is_real=True,
    contributions=(),
    deductions=0.0,
    bonus_annual=0.0,
    bonus_percent=0.0,
):
    return Person(
        id=person_id,
        name=f"Person {person_id}",
        birth_year=birth_year,
        income=Income(
            base_annual=salary,
            growth_rate=growth_rate,
            growth_is_real=growth_is_real,
            bonus_annual=bonus_annual,
            bonus_percent=bonus_percent,
        ),
        payroll=Payroll(contributions=list(contributions), deductions_annual=deductions),
    )


def make_account(account_id="inv", account_type="traditional_401k", balance=159291.0, **kwargs):
    kwargs.setdefault("name", account_id.title())
    return Account(id=account_id, type=account_type, starting_balance=balance, **kwargs)


def make_household(accounts=None, people=None, **kwargs):
    return Household(
        id="hh1",
        name="Test Household",
        start_year=START_YEAR,
        people=list(people) if people is not None else [make_person()],
        accounts=list(accounts) if accounts is not None else [make_account()],
        **kwargs,
    )


def make_scenario(**overrides):
    values = {
        "id": "s1",
        "name": "Base",
        "modeling_mode": "real",
        "nominal_return": 0.07,
        "inflation": 0.03,
        "take_home_annual": 200000.0,
        "swr": 0.03,
        "retirement_monthly_spend": 8000.0,
        "current_monthly_spend": 6353.0,
        "retirement_age_target": 65,
        "include_employer_match": False,
    }
    values.update(overrides)
    return Scenario(**values)
