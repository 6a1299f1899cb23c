"""
Kenyan statutory deductions (monthly, KES).

PAYE is charged on taxable pay (gross less non-taxable allowances) using the
monthly bands below, then reduced by personal relief. SHIF and the housing
levy are flat percentages of gross. NSSF is 6% across two pensionable tiers.
Statutory contributions are not deducted before PAYE.
"""

from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class StatutoryRules:
    # (band width, rate); ``None`` width is the open top band
    paye_bands: Tuple[Tuple[Optional[Decimal], Decimal], ...] = (
        (Decimal('24000'), Decimal('0.10')),
        (Decimal('8333'), Decimal('0.25')),
        (Decimal('467667'), Decimal('0.30')),
        (Decimal('300000'), Decimal('0.325')),
        (None, Decimal('0.35')),
    )
    personal_relief: Decimal = Decimal('2400')
    shif_rate: Decimal = Decimal('0.0275')
    housing_levy_rate: Decimal = Decimal('0.015')
    nssf_rate: Decimal = Decimal('0.06')
    nssf_tier_one_limit: Decimal = Decimal('6000')
    nssf_tier_two_limit: Decimal = Decimal('18000')
    nssf_cap: Decimal = Decimal('1080')


DEFAULT_RULES = StatutoryRules()


@dataclass(frozen=True)
class StatutoryBreakdown:
    gross: Decimal
    taxable: Decimal
    nssf_tier_one: Decimal
    nssf_tier_two: Decimal
    nssf: Decimal
    shif: Decimal
    housing_levy: Decimal
    paye_gross: Decimal
    personal_relief: Decimal
    paye: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    bands: tuple = field(default=())

    def as_dict(self):
        data = asdict(self)
        data['bands'] = [
            {'width': str(width) if width is not None else None, 'rate': str(rate), 'tax': str(tax)}
            for width, rate, tax in self.bands
        ]
        return {key: (str(value) if isinstance(value, Decimal) else value) for key, value in data.items()}


def calculate_paye(taxable, rules: StatutoryRules = DEFAULT_RULES):
    """Returns ``(tax, per-band breakdown)`` before personal relief."""
    remaining = max(_money(taxable), ZERO)
    total = ZERO
    bands = []
    for width, rate in rules.paye_bands:
        if remaining <= 0:
            break
        portion = remaining if width is None else min(remaining, width)
        tax = _money(portion * rate)
        bands.append((width, rate, tax))
        total += tax
        remaining -= portion
    return total, tuple(bands)


def calculate_nssf(gross, rules: StatutoryRules = DEFAULT_RULES):
    gross = max(_money(gross), ZERO)
    tier_one = _money(min(gross, rules.nssf_tier_one_limit) * rules.nssf_rate)
    tier_two_base = max(min(gross, rules.nssf_tier_two_limit) - rules.nssf_tier_one_limit, ZERO)
    tier_two = _money(tier_two_base * rules.nssf_rate)
    total = min(tier_one + tier_two, rules.nssf_cap)
    return tier_one, total - tier_one, total


def calculate_statutory_deductions(basic, allowances=0, non_taxable_allowances=0,
                                   rules: StatutoryRules = DEFAULT_RULES) -> StatutoryBreakdown:
    basic = _money(basic)
    allowances = _money(allowances)
    non_taxable = _money(non_taxable_allowances)
    if min(basic, allowances, non_taxable) < 0:
        raise ValueError('Pay components cannot be negative.')

    gross = basic + allowances + non_taxable
    taxable = gross - non_taxable

    nssf_one, nssf_two, nssf = calculate_nssf(gross, rules)
    shif = _money(gross * rules.shif_rate)
    housing_levy = _money(gross * rules.housing_levy_rate)

    paye_gross, bands = calculate_paye(taxable, rules)
    relief = min(rules.personal_relief, paye_gross)
    paye = paye_gross - relief

    total = nssf + shif + housing_levy + paye
    return StatutoryBreakdown(
        gross=gross,
        taxable=taxable,
        nssf_tier_one=nssf_one,
        nssf_tier_two=nssf_two,
        nssf=nssf,
        shif=shif,
        housing_levy=housing_levy,
        paye_gross=paye_gross,
        personal_relief=_money(relief),
        paye=paye,
        total_deductions=total,
        net_pay=gross - total,
        bands=bands,
    )
