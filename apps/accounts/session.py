"""
Session helpers for the signed-in identity.

Customer/admin sessions (set after django.contrib.auth.login):
    uid, role, email, IsLoggedIn

Worker sessions (workers are not auth users):
    WorkerId, WorkerEmail, WorkerName

Use the helpers below instead of touching request.session keys directly.
"""
from .identity import get_customer_name, role_for_user

UID_KEY = 'uid'
ROLE_KEY = 'role'
EMAIL_KEY = 'email'
LOGGED_IN_KEY = 'IsLoggedIn'

WORKER_ID_KEY = 'WorkerId'
WORKER_EMAIL_KEY = 'WorkerEmail'
WORKER_NAME_KEY = 'WorkerName'

USER_KEYS = (UID_KEY, ROLE_KEY, EMAIL_KEY, LOGGED_IN_KEY)
WORKER_KEYS = (WORKER_ID_KEY, WORKER_EMAIL_KEY, WORKER_NAME_KEY)


def set_user_session(request, user) -> None:
    request.session[UID_KEY] = str(user.pk)
    request.session[ROLE_KEY] = role_for_user(user)
    request.session[EMAIL_KEY] = user.email
    request.session[LOGGED_IN_KEY] = True
    request.session.modified = True


def set_worker_session(request, worker) -> None:
    request.session[WORKER_ID_KEY] = str(worker.pk)
    request.session[WORKER_EMAIL_KEY] = worker.email
    request.session[WORKER_NAME_KEY] = worker.name
    request.session.modified = True


def clear_worker_session(request) -> None:
    for key in WORKER_KEYS:
        request.session.pop(key, None)
    request.session.modified = True


def get_worker_id(request):
    return request.session.get(WORKER_ID_KEY)


def session_identity(request) -> dict:
    """Snapshot of who is signed in, for templates and the session JSON endpoint."""
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return {
            'isLoggedIn': True,
            'uid': str(user.pk),
            'role': role_for_user(user),
            'email': user.email,
            'name': get_customer_name(user),
        }
    worker_id = get_worker_id(request)
    if worker_id:
        return {
            'isLoggedIn': True,
            'uid': worker_id,
            'role': 'worker',
            'email': request.session.get(WORKER_EMAIL_KEY, ''),
            'name': request.session.get(WORKER_NAME_KEY, ''),
        }
    return {'isLoggedIn': False, 'uid': None, 'role': None, 'email': None, 'name': None}
