"""
Role and display-name helpers for auth users.

Customers and admins are both django.contrib.auth users; staff users act as
admins. Workers are not auth users (see apps.workers).
"""


class Role:
    ADMIN = 'admin'
    CUSTOMER = 'customer'
    WORKER = 'worker'


def role_for_user(user) -> str:
    return Role.ADMIN if user.is_staff else Role.CUSTOMER


def get_customer_name(user, default: str = 'Customer') -> str:
    """
    Display name for a customer: "First Last", then whichever half is set,
    then the local part of their email address.
    """
    if user is None:
        return default
    first = (user.first_name or '').strip()
    last = (user.last_name or '').strip()
    full = f"{first} {last}".strip()
    if full:
        return full
    email = (user.email or '').strip()
    if email:
        return email.split('@')[0]
    return default
