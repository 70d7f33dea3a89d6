"""Supported currencies and amount formatting."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from trip_budget.utils.money import Number, round_money


@dataclass(frozen=True)
class Currency:
    code: str  # 3-letter code, unique key
    name: str  # English display name
    name_ar: str  # Arabic display name
    symbol: str
    flag: str = ""

    def display_name(self, arabic: bool = True) -> str:
        return self.name_ar if arabic else self.name


CURRENCIES: Tuple[Currency, ...] = (
    # Gulf and Arab currencies
    Currency("SAR", "Saudi Riyal", "ريال سعودي", "ر.س", "🇸🇦"),
    Currency("AED", "UAE Dirham", "درهم إماراتي", "د.إ", "🇦🇪"),
    Currency("KWD", "Kuwaiti Dinar", "دينار كويتي", "د.ك", "🇰🇼"),
    Currency("QAR", "Qatari Riyal", "ريال قطري", "ر.ق", "🇶🇦"),
    Currency("OMR", "Omani Riyal", "ريال عماني", "ر.ع", "🇴🇲"),
    Currency("BHD", "Bahraini Dinar", "دينار بحريني", "د.ب", "🇧🇭"),
    Currency("JOD", "Jordanian Dinar", "دينار أردني", "د.أ", "🇯🇴"),
    Currency("EGP", "Egyptian Pound", "جنيه مصري", "ج.م", "🇪🇬"),
    Currency("LBP", "Lebanese Pound", "ليرة لبنانية", "ل.ل", "🇱🇧"),
    # Majors
    Currency("USD", "US Dollar", "دولار أمريكي", "$", "🇺🇸"),
    Currency("EUR", "Euro", "يورو", "€", "🇪🇺"),
    Currency("GBP", "British Pound", "جنيه إسترليني", "£", "🇬🇧"),
    Currency("JPY", "Japanese Yen", "ين ياباني", "¥", "🇯🇵"),
    Currency("CHF", "Swiss Franc", "فرنك سويسري", "CHF", "🇨🇭"),
    Currency("CAD", "Canadian Dollar", "دولار كندي", "C$", "🇨🇦"),
    Currency("AUD", "Australian Dollar", "دولار أسترالي", "A$", "🇦🇺"),
    # Asia
    Currency("CNY", "Chinese Yuan", "يوان صيني", "¥", "🇨🇳"),
    Currency("INR", "Indian Rupee", "روبية هندية", "₹", "🇮🇳"),
    Currency("KRW", "South Korean Won", "وون كوري جنوبي", "₩", "🇰🇷"),
    Currency("SGD", "Singapore Dollar", "دولار سنغافوري", "S$", "🇸🇬"),
    Currency("HKD", "Hong Kong Dollar", "دولار هونغ كونغ", "HK$", "🇭🇰"),
    Currency("THB", "Thai Baht", "بات تايلندي", "฿", "🇹🇭"),
    Currency("MYR", "Malaysian Ringgit", "رينغيت ماليزي", "RM", "🇲🇾"),
    # Europe
    Currency("SEK", "Swedish Krona", "كرونة سويدية", "kr", "🇸🇪"),
    Currency("NOK", "Norwegian Krone", "كرونة نرويجية", "kr", "🇳🇴"),
    Currency("DKK", "Danish Krone", "كرونة دنماركية", "kr", "🇩🇰"),
    Currency("PLN", "Polish Zloty", "زلوتي بولندي", "zł", "🇵🇱"),
    Currency("CZK", "Czech Koruna", "كورونا تشيكية", "Kč", "🇨🇿"),
    Currency("HUF", "Hungarian Forint", "فورنت مجري", "Ft", "🇭🇺"),
    # Others
    Currency("RUB", "Russian Ruble", "روبل روسي", "₽", "🇷🇺"),
    Currency("TRY", "Turkish Lira", "ليرة تركية", "₺", "🇹🇷"),
    Currency("ZAR", "South African Rand", "راند جنوب أفريقي", "R", "🇿🇦"),
    Currency("BRL", "Brazilian Real", "ريال برازيلي", "R$", "🇧🇷"),
    Currency("MXN", "Mexican Peso", "بيزو مكسيكي", "$", "🇲🇽"),
    Currency("NZD", "New Zealand Dollar", "دولار نيوزيلندي", "NZ$", "🇳🇿"),
)

_BY_CODE = {c.code: c for c in CURRENCIES}

POPULAR_CODES = ("SAR", "USD", "EUR", "GBP", "AED", "JPY", "CAD", "AUD")

# Symbols written before the number in English output
PREFIX_SYMBOLS = ("$", "£", "€", "¥")


def list_currencies() -> List[Currency]:
    return list(CURRENCIES)


def find_currency(code: str) -> Optional[Currency]:
    if not code:
        return None
    return _BY_CODE.get(code.upper())


def search_currencies(query: str, arabic: bool = True) -> List[Currency]:
    """Case-insensitive match on code, localized name or symbol."""
    term = (query or "").strip().lower()
    if not term:
        return list(CURRENCIES)
    return [
        c for c in CURRENCIES
        if term in c.code.lower()
        or term in c.display_name(arabic).lower()
        or term in c.symbol.lower()
    ]


def popular_currencies() -> List[Currency]:
    return [c for c in CURRENCIES if c.code in POPULAR_CODES]


def currency_name(code: str, arabic: bool = True) -> str:
    currency = find_currency(code)
    return currency.display_name(arabic) if currency else code


def currency_symbol(code: str) -> str:
    currency = find_currency(code)
    return currency.symbol if currency else code


def format_number(amount: Number, arabic: bool = True) -> str:
    """Two fraction digits with thousands grouping.

    Digits stay Latin in both languages; ``arabic`` only selects the
    Arabic decimal and group separators.
    """
    text = f"{round_money(amount):,.2f}"
    if arabic:
        text = text.replace(",", "٬").replace(".", "٫")
    return text


def format_amount(amount: Number, code: str, arabic: bool = True) -> str:
    """Amount with the currency symbol (or code for unknown currencies)."""
    number = format_number(amount, arabic)
    symbol = currency_symbol(code)
    if not arabic and symbol in PREFIX_SYMBOLS:
        return f"{symbol}{number}"
    return f"{number} {symbol}"
