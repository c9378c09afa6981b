class PaymentError(Exception):
    """A payment could not be recorded: bad amount, method, or a booking that is not payable."""
    pass
