"""
Storefront catalog for the App Store chart scan.

Holds every App Store country/region the charts feed serves, plus the
three scan breadths (quick, major, global) that pick a subset of them.
The catalog is built once at import time and never mutated.
"""

import logging
from dataclasses import dataclass

from django.db import models

logger = logging.getLogger(__name__)

PLACEHOLDER_FLAG = "🏳️"


class Region(models.TextChoices):
    AMERICAS = "americas", "Americas"
    EUROPE = "europe", "Europe"
    ASIA_PACIFIC = "asia-pacific", "Asia Pacific"
    MIDDLE_EAST_AFRICA = "middle-east-africa", "Middle East & Africa"


class ScanBreadth(models.TextChoices):
    QUICK = "quick", "Quick (5 countries)"
    MAJOR = "major", "Major markets (20 countries)"
    GLOBAL = "global", "Global (all storefronts)"


@dataclass(frozen=True)
class Country:
    """A single App Store storefront."""

    code: str
    name: str
    flag: str
    region: str

    def __str__(self):
        return f"{self.flag} {self.name}"


def _country_flag(code: str) -> str:
    """Convert 2-letter ISO country code to flag emoji."""
    if not code or len(code) != 2 or not code.isalpha():
        return PLACEHOLDER_FLAG
    return "".join(chr(0x1F1E6 + ord(c) - ord("A")) for c in code.upper())


AMERICAS = Region.AMERICAS
EUROPE = Region.EUROPE
ASIA_PACIFIC = Region.ASIA_PACIFIC
MIDDLE_EAST_AFRICA = Region.MIDDLE_EAST_AFRICA

# (code, name, region) for all 175 storefronts, in display order
_STOREFRONTS = [
    ("US", "United States", AMERICAS),
    ("CA", "Canada", AMERICAS),
    ("MX", "Mexico", AMERICAS),
    ("BR", "Brazil", AMERICAS),
    ("AR", "Argentina", AMERICAS),
    ("CL", "Chile", AMERICAS),
    ("CO", "Colombia", AMERICAS),
    ("PE", "Peru", AMERICAS),
    ("VE", "Venezuela", AMERICAS),
    ("EC", "Ecuador", AMERICAS),
    ("GT", "Guatemala", AMERICAS),
    ("CU", "Cuba", AMERICAS),
    ("BO", "Bolivia", AMERICAS),
    ("DO", "Dominican Republic", AMERICAS),
    ("HN", "Honduras", AMERICAS),
    ("PY", "Paraguay", AMERICAS),
    ("SV", "El Salvador", AMERICAS),
    ("NI", "Nicaragua", AMERICAS),
    ("CR", "Costa Rica", AMERICAS),
    ("PA", "Panama", AMERICAS),
    ("UY", "Uruguay", AMERICAS),
    ("JM", "Jamaica", AMERICAS),
    ("TT", "Trinidad and Tobago", AMERICAS),
    ("BS", "Bahamas", AMERICAS),
    ("BB", "Barbados", AMERICAS),
    ("BZ", "Belize", AMERICAS),
    ("GY", "Guyana", AMERICAS),
    ("SR", "Suriname", AMERICAS),
    ("AI", "Anguilla", AMERICAS),
    ("AG", "Antigua and Barbuda", AMERICAS),
    ("VG", "British Virgin Islands", AMERICAS),
    ("KY", "Cayman Islands", AMERICAS),
    ("DM", "Dominica", AMERICAS),
    ("GD", "Grenada", AMERICAS),
    ("MS", "Montserrat", AMERICAS),
    ("GB", "United Kingdom", EUROPE),
    ("DE", "Germany", EUROPE),
    ("FR", "France", EUROPE),
    ("IT", "Italy", EUROPE),
    ("ES", "Spain", EUROPE),
    ("NL", "Netherlands", EUROPE),
    ("BE", "Belgium", EUROPE),
    ("AT", "Austria", EUROPE),
    ("CH", "Switzerland", EUROPE),
    ("SE", "Sweden", EUROPE),
    ("NO", "Norway", EUROPE),
    ("DK", "Denmark", EUROPE),
    ("FI", "Finland", EUROPE),
    ("PL", "Poland", EUROPE),
    ("PT", "Portugal", EUROPE),
    ("IE", "Ireland", EUROPE),
    ("GR", "Greece", EUROPE),
    ("CZ", "Czech Republic", EUROPE),
    ("RO", "Romania", EUROPE),
    ("HU", "Hungary", EUROPE),
    ("SK", "Slovakia", EUROPE),
    ("BG", "Bulgaria", EUROPE),
    ("HR", "Croatia", EUROPE),
    ("SI", "Slovenia", EUROPE),
    ("LT", "Lithuania", EUROPE),
    ("LV", "Latvia", EUROPE),
    ("EE", "Estonia", EUROPE),
    ("LU", "Luxembourg", EUROPE),
    ("MT", "Malta", EUROPE),
    ("CY", "Cyprus", EUROPE),
    ("IS", "Iceland", EUROPE),
    ("UA", "Ukraine", EUROPE),
    ("RU", "Russia", EUROPE),
    ("TR", "Turkey", EUROPE),
    ("RS", "Serbia", EUROPE),
    ("BA", "Bosnia and Herzegovina", EUROPE),
    ("MK", "North Macedonia", EUROPE),
    ("AL", "Albania", EUROPE),
    ("ME", "Montenegro", EUROPE),
    ("XK", "Kosovo", EUROPE),
    ("MD", "Moldova", EUROPE),
    ("BY", "Belarus", EUROPE),
    ("GE", "Georgia", EUROPE),
    ("AM", "Armenia", EUROPE),
    ("AU", "Australia", ASIA_PACIFIC),
    ("NZ", "New Zealand", ASIA_PACIFIC),
    ("JP", "Japan", ASIA_PACIFIC),
    ("KR", "South Korea", ASIA_PACIFIC),
    ("CN", "China", ASIA_PACIFIC),
    ("HK", "Hong Kong", ASIA_PACIFIC),
    ("TW", "Taiwan", ASIA_PACIFIC),
    ("SG", "Singapore", ASIA_PACIFIC),
    ("IN", "India", ASIA_PACIFIC),
    ("ID", "Indonesia", ASIA_PACIFIC),
    ("MY", "Malaysia", ASIA_PACIFIC),
    ("TH", "Thailand", ASIA_PACIFIC),
    ("VN", "Vietnam", ASIA_PACIFIC),
    ("PH", "Philippines", ASIA_PACIFIC),
    ("PK", "Pakistan", ASIA_PACIFIC),
    ("BD", "Bangladesh", ASIA_PACIFIC),
    ("LK", "Sri Lanka", ASIA_PACIFIC),
    ("NP", "Nepal", ASIA_PACIFIC),
    ("MM", "Myanmar", ASIA_PACIFIC),
    ("KH", "Cambodia", ASIA_PACIFIC),
    ("LA", "Laos", ASIA_PACIFIC),
    ("BN", "Brunei", ASIA_PACIFIC),
    ("MO", "Macau", ASIA_PACIFIC),
    ("MN", "Mongolia", ASIA_PACIFIC),
    ("KZ", "Kazakhstan", ASIA_PACIFIC),
    ("UZ", "Uzbekistan", ASIA_PACIFIC),
    ("KG", "Kyrgyzstan", ASIA_PACIFIC),
    ("TJ", "Tajikistan", ASIA_PACIFIC),
    ("TM", "Turkmenistan", ASIA_PACIFIC),
    ("AZ", "Azerbaijan", ASIA_PACIFIC),
    ("AF", "Afghanistan", ASIA_PACIFIC),
    ("MV", "Maldives", ASIA_PACIFIC),
    ("BT", "Bhutan", ASIA_PACIFIC),
    ("FJ", "Fiji", ASIA_PACIFIC),
    ("PG", "Papua New Guinea", ASIA_PACIFIC),
    ("SB", "Solomon Islands", ASIA_PACIFIC),
    ("VU", "Vanuatu", ASIA_PACIFIC),
    ("WS", "Samoa", ASIA_PACIFIC),
    ("TO", "Tonga", ASIA_PACIFIC),
    ("FM", "Micronesia", ASIA_PACIFIC),
    ("PW", "Palau", ASIA_PACIFIC),
    ("NR", "Nauru", ASIA_PACIFIC),
    ("GU", "Guam", ASIA_PACIFIC),
    ("NC", "New Caledonia", ASIA_PACIFIC),
    ("PF", "French Polynesia", ASIA_PACIFIC),
    ("CK", "Cook Islands", ASIA_PACIFIC),
    ("NU", "Niue", ASIA_PACIFIC),
    ("TK", "Tokelau", ASIA_PACIFIC),
    ("TV", "Tuvalu", ASIA_PACIFIC),
    ("KI", "Kiribati", ASIA_PACIFIC),
    ("MH", "Marshall Islands", ASIA_PACIFIC),
    ("AE", "United Arab Emirates", MIDDLE_EAST_AFRICA),
    ("SA", "Saudi Arabia", MIDDLE_EAST_AFRICA),
    ("IL", "Israel", MIDDLE_EAST_AFRICA),
    ("EG", "Egypt", MIDDLE_EAST_AFRICA),
    ("ZA", "South Africa", MIDDLE_EAST_AFRICA),
    ("NG", "Nigeria", MIDDLE_EAST_AFRICA),
    ("KE", "Kenya", MIDDLE_EAST_AFRICA),
    ("MA", "Morocco", MIDDLE_EAST_AFRICA),
    ("DZ", "Algeria", MIDDLE_EAST_AFRICA),
    ("TN", "Tunisia", MIDDLE_EAST_AFRICA),
    ("LY", "Libya", MIDDLE_EAST_AFRICA),
    ("SD", "Sudan", MIDDLE_EAST_AFRICA),
    ("ET", "Ethiopia", MIDDLE_EAST_AFRICA),
    ("GH", "Ghana", MIDDLE_EAST_AFRICA),
    ("SN", "Senegal", MIDDLE_EAST_AFRICA),
    ("CM", "Cameroon", MIDDLE_EAST_AFRICA),
    ("TZ", "Tanzania", MIDDLE_EAST_AFRICA),
    ("UG", "Uganda", MIDDLE_EAST_AFRICA),
    ("RW", "Rwanda", MIDDLE_EAST_AFRICA),
    ("ZM", "Zambia", MIDDLE_EAST_AFRICA),
    ("ZW", "Zimbabwe", MIDDLE_EAST_AFRICA),
    ("BW", "Botswana", MIDDLE_EAST_AFRICA),
    ("NA", "Namibia", MIDDLE_EAST_AFRICA),
    ("MZ", "Mozambique", MIDDLE_EAST_AFRICA),
    ("AO", "Angola", MIDDLE_EAST_AFRICA),
    ("MU", "Mauritius", MIDDLE_EAST_AFRICA),
    ("MG", "Madagascar", MIDDLE_EAST_AFRICA),
    ("JO", "Jordan", MIDDLE_EAST_AFRICA),
    ("LB", "Lebanon", MIDDLE_EAST_AFRICA),
    ("KW", "Kuwait", MIDDLE_EAST_AFRICA),
    ("QA", "Qatar", MIDDLE_EAST_AFRICA),
    ("BH", "Bahrain", MIDDLE_EAST_AFRICA),
    ("OM", "Oman", MIDDLE_EAST_AFRICA),
    ("YE", "Yemen", MIDDLE_EAST_AFRICA),
    ("IQ", "Iraq", MIDDLE_EAST_AFRICA),
    ("SY", "Syria", MIDDLE_EAST_AFRICA),
    ("PS", "Palestine", MIDDLE_EAST_AFRICA),
    ("ML", "Mali", MIDDLE_EAST_AFRICA),
    ("NE", "Niger", MIDDLE_EAST_AFRICA),
    ("BF", "Burkina Faso", MIDDLE_EAST_AFRICA),
    ("BJ", "Benin", MIDDLE_EAST_AFRICA),
    ("TG", "Togo", MIDDLE_EAST_AFRICA),
    ("SL", "Sierra Leone", MIDDLE_EAST_AFRICA),
    ("LR", "Liberia", MIDDLE_EAST_AFRICA),
    ("CI", "Côte d'Ivoire", MIDDLE_EAST_AFRICA),
]

ALL_COUNTRIES = [
    Country(code=code, name=name, flag=_country_flag(code), region=region.value)
    for code, name, region in _STOREFRONTS
]

COUNTRY_BY_CODE = {c.code: c for c in ALL_COUNTRIES}

ALL_COUNTRY_CODES = [c.code for c in ALL_COUNTRIES]

QUICK_COUNTRIES = ["US", "IN", "GB", "CA", "AU"]

MAJOR_MARKETS = [
    "US", "GB", "CA", "AU", "IN",  # English-speaking
    "DE", "FR", "IT", "ES", "NL",  # Western Europe
    "JP", "KR", "CN", "TW", "HK",  # East Asia
    "BR", "MX", "AR",              # Latin America
    "RU", "TR",                    # Eastern Europe
]

_BREADTH_CODES = {
    ScanBreadth.QUICK: QUICK_COUNTRIES,
    ScanBreadth.MAJOR: MAJOR_MARKETS,
    ScanBreadth.GLOBAL: ALL_COUNTRY_CODES,
}


def normalize_breadth(preset) -> ScanBreadth:
    """
    Coerce a preset name into a ScanBreadth.

    Unknown or missing presets degrade to QUICK, the cheapest scan,
    instead of failing the request.
    """
    if isinstance(preset, ScanBreadth):
        return preset
    try:
        return ScanBreadth(str(preset).strip().lower())
    except ValueError:
        logger.warning(f"Unknown scan breadth {preset!r}, falling back to 'quick'.")
        return ScanBreadth.QUICK


def resolve_breadth(preset) -> list[Country]:
    """Return the ordered storefronts scanned for a breadth preset."""
    breadth = normalize_breadth(preset)
    return [COUNTRY_BY_CODE[code] for code in _BREADTH_CODES[breadth]]


def lookup(code) -> Country:
    """
    Return the storefront for a code (case-insensitive).

    Never fails: unknown codes get a placeholder entry that uses the
    code itself as its name.
    """
    raw = "" if code is None else str(code).strip()
    country = COUNTRY_BY_CODE.get(raw.upper())
    if country is not None:
        return country
    return Country(code=raw.upper(), name=raw, flag=PLACEHOLDER_FLAG, region="")


def country_flag(code) -> str:
    return lookup(code).flag


def country_name(code) -> str:
    return lookup(code).name


def countries_in_region(region) -> list[Country]:
    """All storefronts in a region, in catalog order."""
    value = getattr(region, "value", region)
    return [c for c in ALL_COUNTRIES if c.region == value]
