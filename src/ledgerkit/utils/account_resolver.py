"""Utility for resolving account numbers or names from the BAS chart."""

from ledgerkit.domain import chart
from ledgerkit.domain.errors import ValidationError, account_not_found


def resolve_account(account: str) -> str:
    """Resolve an account number or name to a four-digit account number.

    A four-digit number is accepted even when it is missing from the chart;
    such postings land in the uncategorized bucket of the general ledger.

    Args:
        account: Account number ("1930") or exact account name ("Företagskonto")

    Returns:
        Account number

    Raises:
        ValidationError: If the name matches no account, or matches several
    """
    value = account.strip()
    if value.isdigit():
        if len(value) != 4:
            raise ValidationError(f"Account number must have four digits: '{value}'")
        return value

    wanted = value.lower()
    matches = [acc for acc in chart.list_accounts() if acc.name.lower() == wanted]
    if len(matches) == 1:
        return matches[0].number
    if len(matches) > 1:
        numbers = ", ".join(acc.number for acc in matches)
        raise ValidationError(f"Account name '{value}' is ambiguous ({numbers})")

    raise ValidationError(account_not_found(value))
