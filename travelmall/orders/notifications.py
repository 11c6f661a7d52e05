"""
Customer e-mails for order events.

Sending never raises: failures are logged and reported as False so that
order operations are not rolled back by a mail server problem.
"""
import logging

from django.conf import settings
from django.core.mail import EmailMessage

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    'pending': '주문 접수',
    'confirmed': '예약 확정',
    'paid': '결제 완료',
    'processing': '처리 중',
    'ready': '출발 준비 완료',
    'completed': '여행 완료',
    'cancelled': '주문 취소',
    'refunded': '환불 완료',
}


def _send(to_email, subject, body):
    if not to_email:
        logger.warning(f"Cannot send email '{subject}': no recipient")
        return False
    try:
        email = EmailMessage(
            subject=subject,
            body=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[to_email],
            reply_to=[settings.DEFAULT_FROM_EMAIL],
        )
        email.send(fail_silently=False)
        logger.info(f"Email '{subject}' sent to {to_email}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email '{subject}' to {to_email}: {str(e)}")
        return False


def send_order_confirmation_email(order):
    site_name = getattr(settings, 'SITE_NAME', 'Travel Mall')
    lines = [
        f"{order.customer_name}님, 주문해 주셔서 감사합니다.",
        "",
        f"주문번호: {order.order_number}",
    ]
    for item in order.items.all():
        dates = f" ({item.start_date} ~ {item.end_date})" if item.start_date else ''
        lines.append(f"- {item.product_title}{dates}: {item.subtotal:,.0f} {order.currency}")
    if order.coupon_discount:
        lines.append(f"쿠폰 할인 ({order.coupon_code}): -{order.coupon_discount:,.0f} {order.currency}")
    lines.extend([
        f"결제 금액: {order.total_amount:,.0f} {order.currency}",
        "",
        site_name,
    ])
    return _send(order.customer_email, f"[{site_name}] 주문이 접수되었습니다 ({order.order_number})", "\n".join(lines))


def send_order_status_email(order, previous_status, new_status, reason='', refund_amount=None, is_partial=False):
    """Notify the customer that their order moved to a new status"""
    site_name = getattr(settings, 'SITE_NAME', 'Travel Mall')
    label = STATUS_LABELS.get(new_status, new_status)
    lines = [
        f"{order.customer_name}님의 주문 상태가 변경되었습니다.",
        "",
        f"주문번호: {order.order_number}",
        f"이전 상태: {STATUS_LABELS.get(previous_status, previous_status)}",
        f"현재 상태: {label}",
    ]
    if reason:
        lines.append(f"사유: {reason}")
    if refund_amount is not None:
        refund_type = '부분 환불' if is_partial else '전액 환불'
        lines.append(f"환불 금액: {refund_amount:,.0f} {order.currency} ({refund_type})")
    lines.extend(["", site_name])
    return _send(order.customer_email, f"[{site_name}] 주문 상태 안내: {label} ({order.order_number})", "\n".join(lines))
