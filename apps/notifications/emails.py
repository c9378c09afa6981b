"""
Email notifications for The Rock Waste Management.

All functions are synchronous and fire-and-forget: they are called from views
after a lifecycle operation has committed, and a failed send is logged but
never raised.

Public API:
  send_booking_received(booking)
  send_booking_confirmed(booking)
  send_booking_cancelled(booking, reason='')
  send_worker_welcome(worker)
"""
import logging
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def _booking_context(booking) -> dict:
    """Common template context for all booking emails."""
    return {
        'customer_name':   booking.customer_name,
        'service_name':    booking.service_label,
        'booking_address': booking.booking_address,
        'booking_date':    booking.booking_date,
        'preferred_time':  booking.preferred_time,
        'final_price':     booking.final_price if booking.is_price_set else None,
        'currency':        getattr(settings, 'CURRENCY_SYMBOL', 'R'),
        'booking_ref':     booking.id_short,
        'dashboard_url':   f"{_site_url()}/bookings/",
        'support_email':   settings.DEFAULT_FROM_EMAIL,
    }


def _site_url() -> str:
    return getattr(settings, 'SITE_URL', 'http://127.0.0.1:8000').rstrip('/')


def _send(subject: str, to_email: str, html_template: str, txt_template: str, context: dict):
    """Low-level send helper: builds multipart email with HTML + text fallback."""
    if not to_email:
        logger.warning('Email "%s" skipped, no recipient address', subject)
        return

    try:
        text_body = render_to_string(txt_template, context)
        html_body = render_to_string(html_template, context)

        msg = EmailMultiAlternatives(
            subject=subject,
            body=text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[to_email],
        )
        msg.attach_alternative(html_body, 'text/html')
        msg.send(fail_silently=False)
        logger.info('Email "%s" sent to %s', subject, to_email)
    except Exception as exc:
        # Log but never crash the booking flow due to email failure
        logger.exception('Failed to send email "%s" to %s: %s', subject, to_email, exc)


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def send_booking_received(booking):
    """
    Acknowledge a new booking request.
    Triggered: customer submits the booking form.
    """
    _send(
        subject=f'Booking Received - {booking.service_label} on {booking.booking_date.strftime("%d %b %Y")}',
        to_email=booking.customer.email,
        html_template='emails/booking_received.html',
        txt_template='emails/booking_received.txt',
        context=_booking_context(booking),
    )


def send_booking_confirmed(booking):
    """
    Tell the customer their booking was approved.
    Triggered: admin sets status to approved.
    """
    _send(
        subject=f'Booking Confirmed - {booking.service_label} on {booking.booking_date.strftime("%d %b %Y")}',
        to_email=booking.customer.email,
        html_template='emails/booking_confirmed.html',
        txt_template='emails/booking_confirmed.txt',
        context=_booking_context(booking),
    )


def send_booking_cancelled(booking, reason: str = ''):
    """
    Tell the customer their booking was cancelled or rejected.
    Triggered: customer cancel, admin cancel/reject.
    """
    ctx = _booking_context(booking)
    ctx['status'] = booking.get_status_display()
    ctx['cancellation_reason'] = reason

    _send(
        subject=f'Booking {ctx["status"]} - {booking.service_label} on {booking.booking_date.strftime("%d %b %Y")}',
        to_email=booking.customer.email,
        html_template='emails/booking_cancelled.html',
        txt_template='emails/booking_cancelled.txt',
        context=ctx,
    )


def send_worker_welcome(worker):
    """Login details for a newly added worker."""
    _send(
        subject='Welcome to The Rock Waste Management',
        to_email=worker.email,
        html_template='emails/worker_welcome.html',
        txt_template='emails/worker_welcome.txt',
        context={
            'worker_name':   worker.name,
            'worker_email':  worker.email,
            'login_url':     f"{_site_url()}/workers/login/",
            'support_email': settings.DEFAULT_FROM_EMAIL,
        },
    )
