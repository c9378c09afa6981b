"""
Customer payment views.

  make_payment        GET lists priced, unpaid bookings and past payments;
                      POST records a payment through services.record_payment
  download_receipt_pdf renders a receipt for one of the customer's payments
"""
import logging

from django.contrib import messages
from django.db import DatabaseError
from django.http import HttpResponse, HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.template.loader import get_template
from xhtml2pdf import pisa

from apps.accounts.decorators import customer_required
from apps.bookings.exceptions import BookingAuthorizationError, LifecycleNotFoundError

from .exceptions import PaymentError
from .models import Payment, PaymentMethod
from .receipts import get_receipt_context
from .services import payable_bookings, record_payment

logger = logging.getLogger(__name__)


@customer_required
def make_payment(request):
    if request.method == 'POST':
        booking_id = request.POST.get('booking_id', '').strip()
        try:
            payment = record_payment(
                request.user,
                booking_id=booking_id or None,
                amount=request.POST.get('amount', ''),
                payment_method=request.POST.get('payment_method', ''),
                reference=request.POST.get('reference', ''),
                description=request.POST.get('description', ''),
            )
        except BookingAuthorizationError:
            logger.warning('Customer %s tried to pay for booking %s', request.user.pk, booking_id)
            return HttpResponseForbidden('You are not authorized to pay for this booking.')
        except (PaymentError, LifecycleNotFoundError) as exc:
            messages.error(request, str(exc))
        except DatabaseError:
            logger.exception('Payment failed for customer %s', request.user.pk)
            messages.error(request, 'Payment could not be recorded. Please try again.')
        else:
            messages.success(request, f'Payment of {payment.amount} received. Thank you!')
            return redirect('payments:make_payment')

    return render(request, 'payments/make_payment.html', {
        'payable':         payable_bookings(request.user),
        'payments':        Payment.objects.filter(customer=request.user).select_related('booking')[:10],
        'payment_methods': PaymentMethod.choices,
        'page': 'payments',
    })


# ─────────────────────────────────────────────────────────────────────────────
# VIEW: Receipt PDF
# ─────────────────────────────────────────────────────────────────────────────

@customer_required
def download_receipt_pdf(request, payment_id):
    """Generates and downloads a PDF receipt for one of the customer's payments."""
    payment = get_object_or_404(
        Payment.objects.select_related('booking', 'customer'),
        id=payment_id,
        customer=request.user,
    )

    template = get_template('payments/receipt_pdf.html')
    html = template.render(get_receipt_context(payment))

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="receipt_{payment.id_short}.pdf"'

    pisa_status = pisa.CreatePDF(html, dest=response)
    if pisa_status.err:
        logger.error('Receipt PDF rendering failed for payment %s', payment.pk)
        return HttpResponse('Receipt could not be generated.', status=500)

    return response
