import unicodedata

from django.db import models
from django.utils.translation import gettext_lazy as _


def _normalize_label(label):
    """Lowercase and strip accents so 'Crédito' and 'credito' compare equal."""
    decomposed = unicodedata.normalize("NFKD", label or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).strip().lower()


class PaymentMethod(models.TextChoices):
    """
    Closed set of payment methods, assigned when a sale is recorded.

    Free-text labels from older data or external terminals are mapped once
    through from_label(); anything unrecognised becomes OTHER and is reported
    in its own bucket instead of being dropped from settlement.
    """
    CASH = "CASH", _("Cash")
    PIX = "PIX", _("PIX")
    DEBIT = "DEBIT", _("Debit card")
    CREDIT = "CREDIT", _("Credit card")
    OTHER = "OTHER", _("Other")

    @classmethod
    def from_label(cls, label):
        """
        Map a legacy/free-text label to a PaymentMethod.

        Matching is case- and accent-insensitive and by substring. Debit is
        tested before the generic card keywords so "Cartão de Débito" is a
        debit, while a bare "Cartão" counts as credit.

        Examples:
            >>> PaymentMethod.from_label("Dinheiro")
            <PaymentMethod.CASH: 'CASH'>
            >>> PaymentMethod.from_label("Cartão de Débito")
            <PaymentMethod.DEBIT: 'DEBIT'>
            >>> PaymentMethod.from_label("vale refeição")
            <PaymentMethod.OTHER: 'OTHER'>
        """
        normalized = _normalize_label(label)
        if not normalized:
            return cls.OTHER

        if normalized.upper() in cls.values:
            return cls(normalized.upper())

        for keyword, method in LEGACY_LABEL_KEYWORDS:
            if keyword in normalized:
                return method
        return cls.OTHER

    @property
    def is_card(self):
        return self in (PaymentMethod.DEBIT, PaymentMethod.CREDIT)


# Ordered: first match wins
LEGACY_LABEL_KEYWORDS = (
    ("dinheiro", PaymentMethod.CASH),
    ("cash", PaymentMethod.CASH),
    ("especie", PaymentMethod.CASH),
    ("pix", PaymentMethod.PIX),
    ("debito", PaymentMethod.DEBIT),
    ("debit", PaymentMethod.DEBIT),
    ("credito", PaymentMethod.CREDIT),
    ("credit", PaymentMethod.CREDIT),
    ("cartao", PaymentMethod.CREDIT),
    ("card", PaymentMethod.CREDIT),
)
