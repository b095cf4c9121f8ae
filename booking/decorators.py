"""
Decorators for API access control and rate limiting
"""
from functools import wraps
from django.conf import settings
from django.http import JsonResponse
from django_ratelimit.decorators import ratelimit
import hmac
import logging

logger = logging.getLogger(__name__)


def api_ratelimit(key='ip', rate='30/m', method='ALL', block=False):
    """
    Rate limiting for API endpoints

    Args:
        key: Grouping key (ip, user, user_or_ip, header:x-real-ip)
        rate: Limit as <count>/<period>, e.g. '10/m', '100/h', '1000/d'
        method: HTTP methods to limit (ALL, GET, POST)
        block: Raise Ratelimited instead of returning the JSON 429 below

    Periods:
        s - second
        m - minute
        h - hour
        d - day
    """
    def decorator(func):
        @wraps(func)
        @ratelimit(key=key, rate=rate, method=method, block=block)
        def wrapper(request, *args, **kwargs):
            was_limited = getattr(request, 'limited', False)

            if was_limited:
                logger.warning(
                    f"Rate limit exceeded for {func.__name__}: "
                    f"key={key}, rate={rate}, "
                    f"ip={request.META.get('REMOTE_ADDR')}, "
                    f"user={request.user if request.user.is_authenticated else 'anonymous'}"
                )

                return JsonResponse({
                    'success': False,
                    'error': 'rate_limit_exceeded',
                    'message': 'Too many requests. Please wait a moment.'
                }, status=429)

            return func(request, *args, **kwargs)

        return wrapper
    return decorator


def api_data_ratelimit(rate='60/m'):
    """
    Moderate limit for read endpoints

    Default: 60 requests per minute
    """
    return api_ratelimit(key='user_or_ip', rate=rate, method='GET')


def api_write_ratelimit(rate='20/m'):
    """
    Stricter limit for write endpoints

    Default: 20 requests per minute
    """
    return api_ratelimit(key='user_or_ip', rate=rate, method='POST')


def upload_ratelimit(rate='10/m'):
    """Limit for file uploads"""
    return api_ratelimit(key='user_or_ip', rate=rate, method='POST')


def _token_matches(supplied, expected):
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.strip(), expected)


def get_request_role(request):
    """
    Role of the caller: 'admin', 'staff' or 'unknown'

    A logged-in staff user counts as admin. Otherwise the X-Admin-Token /
    X-Staff-Token headers are compared with ADMIN_TOKEN / STAFF_TOKEN; the
    admin token is also accepted in the staff header. When no ADMIN_TOKEN is
    configured every caller is treated as admin (local development).
    """
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated and user.is_staff:
        return 'admin'

    admin_token = settings.ADMIN_TOKEN
    staff_token = settings.STAFF_TOKEN
    header_admin = request.headers.get('X-Admin-Token')
    header_staff = request.headers.get('X-Staff-Token')

    if not admin_token:
        return 'admin'
    if _token_matches(header_admin, admin_token) or _token_matches(header_staff, admin_token):
        return 'admin'
    if _token_matches(header_staff, staff_token):
        return 'staff'
    return 'unknown'


def role_required(*roles):
    """
    Reject callers whose role is not in `roles` with a JSON 401

    The resolved role is stored on request.actor_role for the view.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(request, *args, **kwargs):
            role = get_request_role(request)
            if role not in roles:
                logger.warning(
                    f"Unauthorized call to {func.__name__}: role={role}, "
                    f"ip={request.META.get('REMOTE_ADDR')}"
                )
                message = 'Admin only' if roles == ('admin',) else 'Unauthorized'
                return JsonResponse({'success': False, 'error': message}, status=401)
            request.actor_role = role
            return func(request, *args, **kwargs)
        return wrapper
    return decorator


def admin_token_required(func):
    return role_required('admin')(func)


def staff_token_required(func):
    return role_required('admin', 'staff')(func)
