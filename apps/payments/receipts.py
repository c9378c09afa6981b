"""
Receipt data for a recorded payment.
Prepares context for payments/receipt_pdf.html.
"""
from django.conf import settings


def get_receipt_context(payment):
    booking = payment.booking

    return {
        'payment': payment,
        'business': {
            'name': 'The Rock Waste Management',
            'email': settings.DEFAULT_FROM_EMAIL,
            'website': getattr(settings, 'SITE_URL', ''),
        },
        'customer': {
            'name': payment.customer_name,
            'email': payment.customer.email,
        },
        'transaction': {
            'reference_id': payment.id_short,
            'reference': payment.reference or 'N/A',
            'method': payment.get_payment_method_display(),
            'date': payment.payment_date,
            'status': payment.get_status_display(),
            'description': payment.description,
        },
        'financials': {
            'paid': payment.amount,
            'currency': getattr(settings, 'CURRENCY_SYMBOL', 'R'),
        },
        'service': {
            'booking_ref': booking.id_short,
            'name': booking.service_label,
            'address': booking.booking_address,
            'date': booking.booking_date,
            'time': booking.preferred_time,
        } if booking else None,
    }
