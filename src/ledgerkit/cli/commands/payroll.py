"""Employee and payroll commands."""

from decimal import Decimal, InvalidOperation

import click

from ledgerkit.cli.error_handling import handle_domain_error, parse_date_option
from ledgerkit.domain.entities import AdjustmentKind, PayAdjustment
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.payroll import PayrollService
from ledgerkit.utils.amount_parser import format_amount, parse_amount


def _parse_rate(value: str, label: str) -> Decimal:
    """Parse a rate given as a fraction (0.30) or a percentage (30%)."""
    text = value.strip().replace(",", ".")
    percent = text.endswith("%")
    try:
        rate = Decimal(text.rstrip("%").strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid {label}: '{value}'") from e
    return rate / 100 if percent else rate


def parse_adjustment(text: str, kind: AdjustmentKind) -> PayAdjustment:
    """Parse EMPLOYEE_ID:VALUE into a pay adjustment.

    VALUE is days for sick leave, hours for overtime and an amount for
    bonuses and deductions.

    Raises:
        ValueError: If the text is malformed
    """
    employee_text, sep, value_text = text.partition(":")
    if not sep or not employee_text.strip().isdigit():
        raise ValueError(f"Adjustment must be EMPLOYEE_ID:VALUE, got '{text}'")
    employee_id = int(employee_text)
    value = parse_amount(value_text)
    if kind in (AdjustmentKind.SICK, AdjustmentKind.OVERTIME):
        return PayAdjustment(employee_id=employee_id, kind=kind, quantity=value)
    return PayAdjustment(employee_id=employee_id, kind=kind, amount=value)


@click.group()
def employee_group():
    """Manage employees."""
    pass


@employee_group.command("add")
@click.option("--name", required=True, help="Full name")
@click.option("--personal-number", required=True, help="Personal identity number (YYYYMMDD-XXXX)")
@click.option("--salary", required=True, help="Monthly salary")
@click.option("--tax-rate", required=True, help="Withholding tax rate, e.g. 0.30 or 30%")
@click.option("--union-fee", default="0", show_default=True, help="Monthly union fee")
@click.option("--fund-fee", default="0", show_default=True, help="Monthly unemployment fund fee")
@click.option("--pension-rate", default="0.045", show_default=True, help="Occupational pension rate")
@click.pass_context
def add_employee(
    ctx,
    name: str,
    personal_number: str,
    salary: str,
    tax_rate: str,
    union_fee: str,
    fund_fee: str,
    pension_rate: str,
):
    """Add an employee.

    Examples:
        ledgerkit employee add --name "Anna Andersson" --personal-number 19850615-1234 \\
            --salary 35000 --tax-rate 30%
    """
    service = PayrollService(ctx.obj["db"])
    try:
        monthly_salary = parse_amount(salary)
        parsed_union_fee = parse_amount(union_fee)
        parsed_fund_fee = parse_amount(fund_fee)
        parsed_tax_rate = _parse_rate(tax_rate, "tax rate")
        parsed_pension_rate = _parse_rate(pension_rate, "pension rate")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        employee_id = service.create_employee(
            name=name,
            personal_number=personal_number,
            monthly_salary=monthly_salary,
            tax_rate=parsed_tax_rate,
            union_fee=parsed_union_fee,
            unemployment_fund_fee=parsed_fund_fee,
            pension_rate=parsed_pension_rate,
        )
        click.echo(f"Created employee '{name}' (ID: {employee_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@employee_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive employees")
@click.pass_context
def list_employees(ctx, include_inactive: bool):
    """List employees."""
    service = PayrollService(ctx.obj["db"])
    employees = service.list_employees(active_only=not include_inactive)
    if not employees:
        click.echo("No employees found.")
        return

    click.echo(f"{'ID':>4}  {'Name':<30} {'Personal number':<15} {'Salary':>12} {'Tax':>6}")
    click.echo("-" * 72)
    for employee in employees:
        inactive = " (inactive)" if not employee.active else ""
        click.echo(
            f"{employee.id:>4}  {(employee.name + inactive)[:30]:<30} "
            f"{employee.personal_number:<15} {format_amount(employee.monthly_salary):>12} "
            f"{employee.tax_rate * 100:>5.1f}%"
        )


@click.group()
def payroll_group():
    """Run payroll and inspect payslips."""
    pass


@payroll_group.command("run")
@click.option("--date", "date_str", help="Pay date, defaults to today")
@click.option("--employee", "employee_ids", type=int, multiple=True, help="Employee ID (repeatable), defaults to all active")
@click.option("--sick", multiple=True, help="Sick days as EMPLOYEE_ID:DAYS (repeatable)")
@click.option("--overtime", multiple=True, help="Overtime as EMPLOYEE_ID:HOURS (repeatable)")
@click.option("--bonus", multiple=True, help="Bonus as EMPLOYEE_ID:AMOUNT (repeatable)")
@click.option("--deduction", multiple=True, help="Deduction as EMPLOYEE_ID:AMOUNT (repeatable)")
@click.pass_context
def run_payroll(
    ctx,
    date_str: str | None,
    employee_ids: tuple[int, ...],
    sick: tuple[str, ...],
    overtime: tuple[str, ...],
    bonus: tuple[str, ...],
    deduction: tuple[str, ...],
):
    """Pay employees and book one verification per payslip.

    Examples:
        ledgerkit payroll run --date 2025-01-25
        ledgerkit payroll run --date 2025-02-25 --sick 1:3 --overtime 1:10
    """
    service = PayrollService(ctx.obj["db"])

    on_date = parse_date_option(ctx, date_str, label="pay date")
    try:
        adjustments = [
            parse_adjustment(text, kind)
            for kind, values in (
                (AdjustmentKind.SICK, sick),
                (AdjustmentKind.OVERTIME, overtime),
                (AdjustmentKind.BONUS, bonus),
                (AdjustmentKind.DEDUCTION, deduction),
            )
            for text in values
        ]
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        payslips = service.run_payroll(
            employee_ids=employee_ids or None,
            adjustments=adjustments,
            on_date=on_date,
        )
        if not payslips:
            click.echo("No employees to pay.")
            return
        for payslip in payslips:
            click.echo(
                f"{payslip.employee_name}: gross {format_amount(payslip.gross_salary)}, "
                f"tax {format_amount(payslip.tax)}, net {format_amount(payslip.net_pay)} "
                f"(verification ID: {payslip.verification_id})"
            )
    except DomainError as e:
        handle_domain_error(ctx, e)


@payroll_group.command("payslips")
@click.option("--employee", "employee_id", type=int, help="Only payslips of this employee")
@click.option("--details", is_flag=True, help="Show payslip lines")
@click.pass_context
def list_payslips(ctx, employee_id: int | None, details: bool):
    """List booked payslips, most recent first."""
    service = PayrollService(ctx.obj["db"])
    payslips = service.list_payslips(employee_id=employee_id)
    if not payslips:
        click.echo("No payslips found.")
        return

    click.echo(
        f"{'Date':<10}  {'Employee':<26} {'Gross':>12} {'Tax':>10} {'Net':>12} {'Contrib.':>10}"
    )
    click.echo("-" * 86)
    for payslip in payslips:
        click.echo(
            f"{payslip.date.isoformat():<10}  {payslip.employee_name[:26]:<26} "
            f"{format_amount(payslip.gross_salary):>12} {format_amount(payslip.tax):>10} "
            f"{format_amount(payslip.net_pay):>12} {format_amount(payslip.employer_contribution):>10}"
        )
        if details:
            for line in payslip.lines:
                click.echo(f"{'':<12}{line.label:<38} {format_amount(line.amount):>12}")


def register_commands(cli):
    """Register employee and payroll commands with main CLI."""
    cli.add_command(employee_group, name="employee")
    cli.add_command(payroll_group, name="payroll")
