"""
Template Renderer
Merges a lease (with tenant and room resolved) into a template body.

Every {{Name}} token with a known value is replaced verbatim; unknown tokens
are left in place. Values are not HTML-escaped.
"""
from __future__ import annotations

import logging
import re
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Optional, Union

from leasedesk.core.clock import Clock, SystemClock
from leasedesk.core.config import Settings, get_settings
from leasedesk.models.lease import LeaseAgreement

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\{\{(\w+)\}\}")

NOT_AVAILABLE = "N/A"


def ordinal(number: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 21 -> '21st', 112 -> '112th'."""
    suffix = "th"
    if not 11 <= number % 100 <= 13:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def format_money(amount: Union[Decimal, float, int], symbol: str = "R") -> str:
    value = Decimal(str(amount)).quantize(Decimal("0.01"))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def lease_duration_months(lease: LeaseAgreement) -> int:
    """
    Calendar month difference between start and end date. When the lease runs
    whole months (the day after the end date falls on the start day of the
    month) the end date counts as the last day of the lease, so
    2024-01-01 .. 2024-12-31 is 12 months and 2024-01-15 .. 2024-07-14 is 6,
    while 2024-01-31 .. 2024-02-29 stays 1.
    """
    start, end = lease.start_date, lease.end_date
    following = end + timedelta(days=1)
    if following.day == start.day:
        end = following
    return (end.year - start.year) * 12 + end.month - start.month


def merge(html: str, values: Dict[str, str]) -> str:
    return _TOKEN.sub(lambda m: values.get(m.group(1), m.group(0)), html)


class TemplateRenderer:
    def __init__(self, settings: Optional[Settings] = None, clock: Optional[Clock] = None):
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock()

    def build_variables(self, lease: LeaseAgreement) -> Dict[str, str]:
        s = self.settings
        tenant = lease.tenant
        room = lease.room
        now = self.clock.now_local()

        def _or_na(value: Optional[str]) -> str:
            return value if value else NOT_AVAILABLE

        return {
            "TenantName": _or_na(tenant.full_name if tenant else None),
            "TenantContact": _or_na(tenant.contact if tenant else None),
            "TenantEmergencyContact": _or_na(tenant.emergency_contact_name if tenant else None),
            "TenantEmergencyNumber": _or_na(tenant.emergency_contact_number if tenant else None),
            "RoomNumber": _or_na(room.number if room else None),
            "RoomType": _or_na(room.type if room else None),
            "StartDate": lease.start_date.strftime(s.DISPLAY_DATE_FORMAT),
            "EndDate": lease.end_date.strftime(s.DISPLAY_DATE_FORMAT),
            "RentAmount": format_money(lease.rent_amount, s.CURRENCY_SYMBOL),
            "ExpectedRentDay": ordinal(lease.expected_rent_day),
            "LeaseAgreementId": str(lease.id),
            "GeneratedDate": now.strftime(s.DISPLAY_DATE_FORMAT),
            "GeneratedTime": now.strftime(s.DISPLAY_TIME_FORMAT),
            "LeaseDurationMonths": str(lease_duration_months(lease)),
            "CompanyName": s.COMPANY_NAME,
            "CompanyAddress": s.COMPANY_ADDRESS,
            "CompanyPhone": s.COMPANY_PHONE,
            "CompanyEmail": s.COMPANY_EMAIL,
        }

    def render(self, lease: LeaseAgreement, template_html: str) -> str:
        html = merge(template_html, self.build_variables(lease))
        leftover = sorted(set(_TOKEN.findall(html)))
        if leftover:
            logger.info(f"[LEASE][RENDER] Lease {lease.id}: unknown placeholders left as-is: {leftover}")
        return html
