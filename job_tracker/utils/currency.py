"""Country/currency table and salary formatting."""

from dataclasses import dataclass

from job_tracker.utils.sanitize import parse_number

DEFAULT_COUNTRY = "PH"


@dataclass(frozen=True)
class Country:
    code: str
    name: str
    currency: str
    symbol: str


COUNTRIES = [
    Country("US", "United States", "USD", "$"),
    Country("CA", "Canada", "CAD", "C$"),
    Country("GB", "United Kingdom", "GBP", "£"),
    Country("EU", "European Union", "EUR", "€"),
    Country("AU", "Australia", "AUD", "A$"),
    Country("JP", "Japan", "JPY", "¥"),
    Country("IN", "India", "INR", "₹"),
    Country("SG", "Singapore", "SGD", "S$"),
    Country("HK", "Hong Kong", "HKD", "HK$"),
    Country("CN", "China", "CNY", "¥"),
    Country("KR", "South Korea", "KRW", "₩"),
    Country("DE", "Germany", "EUR", "€"),
    Country("FR", "France", "EUR", "€"),
    Country("NL", "Netherlands", "EUR", "€"),
    Country("CH", "Switzerland", "CHF", "CHF "),
    Country("SE", "Sweden", "SEK", "kr "),
    Country("NO", "Norway", "NOK", "kr "),
    Country("DK", "Denmark", "DKK", "kr "),
    Country("BR", "Brazil", "BRL", "R$"),
    Country("MX", "Mexico", "MXN", "$"),
    Country("ZA", "South Africa", "ZAR", "R"),
    Country("PH", "Philippines", "PHP", "₱"),
]

_BY_CODE = {c.code: c for c in COUNTRIES}


def get_country(code: str | None) -> Country | None:
    return _BY_CODE.get((code or "").upper())


def format_salary(amount, country_code: str = DEFAULT_COUNTRY) -> str:
    """Format a salary with the country's currency symbol, no decimals."""
    country = get_country(country_code) or _BY_CODE[DEFAULT_COUNTRY]
    number = parse_number(amount)
    if number is None:
        return f"{country.symbol}0"
    return f"{country.symbol}{round(number):,}"
