from django.shortcuts import redirect
from django.http import JsonResponse
from django.views.decorators.http import require_GET
from django.db import connection
import logging

logger = logging.getLogger(__name__)


def home(request):
    return redirect('manager:dashboard')


@require_GET
def ping(request):
    return JsonResponse({'status': 'ok'})


@require_GET
def db_ping(request):
    """Round trip to the database with SELECT 1"""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            row = cursor.fetchone()
        return JsonResponse({
            'ok': True,
            'info': {
                'vendor': connection.vendor,
                'database': str(connection.settings_dict.get('NAME')),
                'result': row[0] if row else None,
            },
        })
    except Exception as e:
        logger.error(f"Database ping failed: {e}", exc_info=True)
        return JsonResponse({'ok': False, 'error': str(e)}, status=500)
