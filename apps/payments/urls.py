from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    path('',                               views.make_payment,         name='make_payment'),
    path('<uuid:payment_id>/receipt/',     views.download_receipt_pdf, name='receipt'),
]
