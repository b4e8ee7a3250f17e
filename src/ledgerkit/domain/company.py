"""Company settings domain service."""

import re
from dataclasses import replace
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import CompanySettings, VatFrequency
from ledgerkit.domain.errors import ValidationError
from ledgerkit.domain.periods import parse_fiscal_year_end

_ORG_NUMBER = re.compile(r"^\d{6}-?\d{4}$")


class CompanyService:
    """Service for reading and updating company settings."""

    def __init__(self, db: Database):
        """Initialize company service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_settings(self) -> CompanySettings:
        """Get current company settings."""
        return self.db.get_company_settings()

    def update_settings(
        self,
        org_number: Optional[str] = None,
        company_name: Optional[str] = None,
        vat_number: Optional[str] = None,
        vat_frequency: Optional[VatFrequency] = None,
        fiscal_year_end: Optional[str] = None,
    ) -> CompanySettings:
        """Update the given settings fields.

        Args:
            org_number: Organisation number, NNNNNN-NNNN
            company_name: Company name used in filings
            vat_number: VAT registration number, derived from org_number when unset
            vat_frequency: How often VAT is declared
            fiscal_year_end: Fiscal year end as MM-DD

        Returns:
            Updated settings

        Raises:
            ValidationError: If a value is malformed
        """
        settings = self.db.get_company_settings()
        changes = {}
        if org_number is not None:
            if not _ORG_NUMBER.match(org_number.strip()):
                raise ValidationError(
                    f"Organisation number must be NNNNNN-NNNN, got '{org_number}'"
                )
            changes["org_number"] = org_number.strip()
        if company_name is not None:
            changes["company_name"] = company_name.strip()
        if vat_number is not None:
            changes["vat_number"] = vat_number.strip().upper() or None
        if vat_frequency is not None:
            changes["vat_frequency"] = VatFrequency(vat_frequency)
        if fiscal_year_end is not None:
            parse_fiscal_year_end(fiscal_year_end)
            changes["fiscal_year_end"] = fiscal_year_end

        updated = replace(settings, **changes)
        self.db.save_company_settings(updated)
        return updated
