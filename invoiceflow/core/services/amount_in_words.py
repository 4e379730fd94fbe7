"""Rupee amounts in words using the Indian numbering system."""

from invoiceflow.core.exceptions import InvalidAmountError

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000
HUNDRED = 100


def _below_hundred(n: int) -> str:
    if n < 20:
        return ONES[n]
    words = TENS[n // 10]
    if n % 10:
        words += f" {ONES[n % 10]}"
    return words


def _spell(n: int) -> str:
    """Spell a positive integer, grouping crore/lakh/thousand/hundred."""
    parts: list[str] = []

    if n >= CRORE:
        # Crore count itself may exceed 99, so spell it recursively
        parts.append(f"{_spell(n // CRORE)} Crore")
        n %= CRORE
    if n >= LAKH:
        parts.append(f"{_below_hundred(n // LAKH)} Lakh")
        n %= LAKH
    if n >= THOUSAND:
        parts.append(f"{_below_hundred(n // THOUSAND)} Thousand")
        n %= THOUSAND
    if n >= HUNDRED:
        parts.append(f"{ONES[n // HUNDRED]} Hundred")
        n %= HUNDRED
    if n > 0:
        parts.append(_below_hundred(n))

    return " ".join(parts)


class AmountInWordsConverter:
    """Render whole-rupee totals as words for the invoice footer."""

    SUFFIX = "Rupees Only"

    def to_words(self, whole_rupees: int) -> str:
        """
        Convert a whole-rupee amount to words.

        >>> AmountInWordsConverter().to_words(100000)
        'One Lakh Rupees Only'

        Raises:
            InvalidAmountError: If the amount is negative or not an integer
        """
        if isinstance(whole_rupees, bool) or not isinstance(whole_rupees, int):
            raise InvalidAmountError(
                "amount", "Amount in words requires whole rupees", whole_rupees
            )
        if whole_rupees < 0:
            raise InvalidAmountError("amount", "Amount cannot be negative", whole_rupees)
        if whole_rupees == 0:
            return f"Zero {self.SUFFIX}"
        return f"{_spell(whole_rupees)} {self.SUFFIX}"
