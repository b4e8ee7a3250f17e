"""SQLAlchemy models for ledgerkit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Verification(Base):
    """Verification (journal entry) model."""

    __tablename__ = "verifications"

    id = Column(Integer, primary_key=True)
    series = Column(String(4), nullable=False, default="A")
    number = Column(Integer, nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(String, nullable=False, default="")
    # Unique so that a verification can be reversed only once
    reverses_id = Column(Integer, ForeignKey("verifications.id"), nullable=True, unique=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("series", "number", name="uq_series_number"),)

    # Relationships
    rows = relationship(
        "VerificationRow",
        back_populates="verification",
        cascade="all, delete-orphan",
        order_by="VerificationRow.position",
    )


class VerificationRow(Base):
    """Debit or credit row of a verification."""

    __tablename__ = "verification_rows"

    id = Column(Integer, primary_key=True)
    verification_id = Column(Integer, ForeignKey("verifications.id"), nullable=False)
    position = Column(Integer, nullable=False)
    account = Column(String(4), nullable=False, index=True)
    debit = Column(Numeric(14, 2), nullable=False, default=0)
    credit = Column(Numeric(14, 2), nullable=False, default=0)
    description = Column(String, nullable=True)

    # Relationships
    verification = relationship("Verification", back_populates="rows")


class CompanySettings(Base):
    """Single-row company settings model."""

    __tablename__ = "company_settings"

    id = Column(Integer, primary_key=True)
    org_number = Column(String, nullable=False)
    company_name = Column(String, nullable=False, default="")
    vat_number = Column(String, nullable=True)
    vat_frequency = Column(String, nullable=False, default="quarterly")
    fiscal_year_end = Column(String(5), nullable=False, default="12-31")


class Period(Base):
    """Reporting period record."""

    __tablename__ = "periods"

    id = Column(String, primary_key=True)
    kind = Column(String, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="open")
    name = Column(String, nullable=False, default="")

    # Relationships
    report = relationship("Report", back_populates="period", uselist=False)


class Report(Base):
    """Stored report payload: draft overrides or a frozen snapshot."""

    __tablename__ = "reports"

    period_id = Column(String, ForeignKey("periods.id"), primary_key=True)
    kind = Column(String, nullable=False)
    data = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    submitted_at = Column(DateTime, nullable=True)

    # Relationships
    period = relationship("Period", back_populates="report")


class Employee(Base):
    """Employee model."""

    __tablename__ = "employees"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    personal_number = Column(String, unique=True, nullable=False)
    monthly_salary = Column(Numeric(12, 2), nullable=False)
    tax_rate = Column(Numeric(6, 4), nullable=False)
    union_fee = Column(Numeric(10, 2), nullable=False, default=0)
    unemployment_fund_fee = Column(Numeric(10, 2), nullable=False, default=0)
    pension_rate = Column(Numeric(6, 4), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    payslips = relationship("Payslip", back_populates="employee")


class Payslip(Base):
    """Booked payslip model."""

    __tablename__ = "payslips"

    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    verification_id = Column(Integer, ForeignKey("verifications.id"), nullable=True)
    date = Column(Date, nullable=False)
    employee_name = Column(String, nullable=False)
    base_salary = Column(Numeric(12, 2), nullable=False)
    gross_salary = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False)
    employer_contribution = Column(Numeric(12, 2), nullable=False)
    contribution_rate = Column(Numeric(6, 4), nullable=False)
    pension = Column(Numeric(12, 2), nullable=False)
    union_fee = Column(Numeric(10, 2), nullable=False)
    unemployment_fund_fee = Column(Numeric(10, 2), nullable=False)
    net_pay = Column(Numeric(12, 2), nullable=False)
    lines = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    employee = relationship("Employee", back_populates="payslips")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
