"""
Cash session lifecycle and settlement.

A session is opened with a float, accumulates sales, and is closed with a
cash count. Expected cash is the float plus cash sales only; card and PIX
money never enters the drawer. Discrepancies are recorded on the session and
left for a manager to verify.
"""
import logging
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Dict, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Count, Sum
from django.utils import timezone

from payments.models import PaymentMethod
from payments.money import quantize, to_decimal, ZERO
from users.models import User
from .exceptions import (
    ApproverRequiredError,
    InvalidBalanceError,
    SessionNotClosedError,
    SessionNotOpenError,
)
from .models import CashSession

logger = logging.getLogger(__name__)


def _currency(tenant) -> str:
    from settings.services import SettingsService
    return SettingsService.get_settings(tenant).currency


@dataclass
class SessionSummary:
    """
    Sales of one session bucketed by payment method.

    ``grand_total`` covers the four known methods only; orders whose method
    is OTHER are reported in ``unclassified`` and counted in
    ``unclassified_count`` so they are visible without distorting the total.
    """
    cash: Decimal = ZERO
    pix: Decimal = ZERO
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    unclassified: Decimal = ZERO
    grand_total: Decimal = ZERO
    order_count: int = 0
    unclassified_count: int = 0
    fee_total: Decimal = ZERO
    expected_cash: Decimal = ZERO

    def as_dict(self) -> Dict:
        return asdict(self)


BUCKETS = {
    PaymentMethod.CASH: "cash",
    PaymentMethod.PIX: "pix",
    PaymentMethod.DEBIT: "debit",
    PaymentMethod.CREDIT: "credit",
}


def _require_approver(user, action):
    if user is None or not getattr(user, "is_manager_or_higher", False):
        raise ApproverRequiredError(f"Only a manager can {action} a cash session.")


def _validated_amount(value, field) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError:
        raise InvalidBalanceError(f"{field} must be a number.", details={field: "Must be a number."})
    if amount < 0:
        raise InvalidBalanceError(f"{field} cannot be negative.", details={field: "Cannot be negative."})
    return amount


class CashSessionService:

    @staticmethod
    def open_session(tenant, operator, initial_balance=ZERO, clock=timezone.now) -> Tuple[CashSession, bool]:
        """
        Open a session for ``operator``, or return the one already open.

        The operator row is locked for the duration of the check so two
        terminals opening at once serialize; the partial unique constraint
        backs this up on databases where the lock is a no-op.

        Returns:
            (session, created)
        """
        amount = quantize(_currency(tenant), _validated_amount(initial_balance, "initial_balance"))

        with transaction.atomic():
            User.all_objects.select_for_update().filter(pk=operator.pk).first()

            existing = CashSession.all_objects.filter(operator=operator, status=CashSession.Status.OPEN).first()
            if existing is not None:
                logger.info(f"Operator {operator.pk} already has open session {existing.pk}")
                return existing, False

            try:
                with transaction.atomic():
                    session = CashSession.all_objects.create(
                        tenant=tenant,
                        operator=operator,
                        initial_balance=amount,
                        opened_at=clock(),
                    )
            except IntegrityError:
                existing = CashSession.all_objects.get(operator=operator, status=CashSession.Status.OPEN)
                return existing, False

        logger.info(f"Opened cash session {session.pk} for operator {operator.pk} with {amount}")
        return session, True

    @staticmethod
    def current_session(operator) -> Optional[CashSession]:
        return CashSession.all_objects.filter(operator=operator, status=CashSession.Status.OPEN).first()

    @staticmethod
    def session_summary(session: CashSession) -> SessionSummary:
        from orders.models import Order

        currency = _currency(session.tenant)
        rows = (
            Order.all_objects
            .filter(session=session, status=Order.OrderStatus.COMPLETED)
            .values('payment_method')
            .annotate(total=Sum('total_amount'), count=Count('id'), fees=Sum('fee_amount'))
        )

        summary = SessionSummary()
        for row in rows:
            total = row['total'] or ZERO
            bucket = BUCKETS.get(row['payment_method'])
            if bucket is None:
                summary.unclassified += total
                summary.unclassified_count += row['count']
            else:
                setattr(summary, bucket, getattr(summary, bucket) + total)
            summary.order_count += row['count']
            summary.fee_total += row['fees'] or ZERO

        for field in ("cash", "pix", "debit", "credit", "unclassified", "fee_total"):
            setattr(summary, field, quantize(currency, getattr(summary, field)))
        summary.grand_total = summary.cash + summary.pix + summary.debit + summary.credit
        summary.expected_cash = quantize(currency, session.initial_balance + summary.cash)

        if summary.unclassified_count:
            logger.warning(
                f"Session {session.pk} has {summary.unclassified_count} orders "
                f"with an unclassified payment method ({summary.unclassified})"
            )
        return summary

    @staticmethod
    def close_session(session: CashSession, counted_cash, notes: str = "", user=None, clock=timezone.now) -> CashSession:
        """
        Close an open session against the operator's cash count.

        A mismatch between counted and expected cash is stored, not rejected.

        Raises:
            SessionNotOpenError: If the session is already closed
            InvalidBalanceError: If the count is negative
        """
        counted = _validated_amount(counted_cash, "counted_cash")

        with transaction.atomic():
            session = CashSession.all_objects.select_for_update().get(pk=session.pk)
            if not session.is_open:
                raise SessionNotOpenError(session)

            summary = CashSessionService.session_summary(session)
            session.calculated_balance = summary.expected_cash
            session.final_balance = quantize(_currency(session.tenant), counted)
            session.notes = notes or ""
            session.closed_at = clock()
            session.closed_by = user
            session.status = CashSession.Status.CLOSED
            session.save()

        if session.discrepancy:
            logger.warning(
                f"Cash session {session.pk} closed with discrepancy {session.discrepancy} "
                f"(expected {session.calculated_balance}, counted {session.final_balance})"
            )
        else:
            logger.info(f"Cash session {session.pk} closed, balance {session.final_balance}")
        return session

    @staticmethod
    def verify_session(session: CashSession, approver, clock=timezone.now) -> CashSession:
        """
        Record a manager's acceptance of a closed session's count.

        Verifying an already verified session leaves the first stamp intact.
        """
        _require_approver(approver, "verify")

        with transaction.atomic():
            session = CashSession.all_objects.select_for_update().get(pk=session.pk)
            if session.is_open:
                raise SessionNotClosedError(session)
            if session.is_verified:
                return session

            session.verified_by = approver
            session.verified_at = clock()
            session.save(update_fields=['verified_by', 'verified_at'])

        logger.info(f"Cash session {session.pk} verified by {approver.pk}")
        return session

    @staticmethod
    def force_close(session: CashSession, approver, notes: str = "", clock=timezone.now) -> CashSession:
        """
        Close a session on the operator's behalf without a cash count.

        The counted balance is taken to equal the expected one and the
        session is verified by the approver in the same step.
        """
        _require_approver(approver, "force-close")

        with transaction.atomic():
            session = CashSession.all_objects.select_for_update().get(pk=session.pk)
            if not session.is_open:
                raise SessionNotOpenError(session)

            now = clock()
            summary = CashSessionService.session_summary(session)
            session.calculated_balance = summary.expected_cash
            session.final_balance = summary.expected_cash
            session.notes = notes or "Force closed"
            session.closed_at = now
            session.closed_by = approver
            session.verified_by = approver
            session.verified_at = now
            session.status = CashSession.Status.CLOSED
            session.save()

        logger.warning(f"Cash session {session.pk} of operator {session.operator_id} force closed by {approver.pk}")
        return session

    @staticmethod
    def session_history(tenant, operator=None):
        queryset = CashSession.all_objects.filter(tenant=tenant).select_related(
            'operator', 'closed_by', 'verified_by'
        )
        if operator is not None:
            queryset = queryset.filter(operator=operator)
        return queryset.order_by('-opened_at', '-id')
