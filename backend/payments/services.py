from dataclasses import dataclass
from decimal import Decimal
import logging

from .models import PaymentMethod
from .money import quantize, percentage_of, to_decimal, ZERO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionFee:
    """Fee charged by the card acquirer and what is left for the business."""
    amount: Decimal
    fee: Decimal
    net: Decimal
    rate: Decimal


class PaymentFeeService:
    """
    Computes acquirer fees for a sale.

    Only card payments carry a fee: the tenant's debit rate for DEBIT and the
    credit rate for CREDIT. Cash, PIX and unclassified methods are fee-free.
    The fee is rounded to the currency unit and the net is derived from it,
    so fee + net always equals the original amount.
    """

    @staticmethod
    def rate_for(method, rates) -> Decimal:
        """
        Return the percentage rate that applies to ``method``.

        Args:
            method: PaymentMethod (or its string value)
            rates: object exposing ``debit_fee_rate`` and ``credit_fee_rate``
                   (GlobalSettings or a plain namespace)
        """
        method = PaymentMethod(method)
        if method == PaymentMethod.DEBIT:
            return to_decimal(rates.debit_fee_rate)
        if method == PaymentMethod.CREDIT:
            return to_decimal(rates.credit_fee_rate)
        return ZERO

    @staticmethod
    def calculate_transaction_fee(amount, method, rates, currency: str = "BRL") -> TransactionFee:
        """
        Split ``amount`` into fee and net for the given payment method.

        Examples:
            30.00 paid by CREDIT at 4% -> fee 1.20, net 28.80
            50.00 paid in CASH        -> fee 0.00, net 50.00
        """
        amount = quantize(currency, amount)
        rate = PaymentFeeService.rate_for(method, rates)

        if rate <= 0:
            return TransactionFee(amount=amount, fee=quantize(currency, ZERO), net=amount, rate=rate)

        fee = quantize(currency, percentage_of(amount, rate))
        net = amount - fee

        logger.debug(f"Fee for {method} {amount}: {fee} at {rate}% (net {net})")
        return TransactionFee(amount=amount, fee=fee, net=net, rate=rate)
