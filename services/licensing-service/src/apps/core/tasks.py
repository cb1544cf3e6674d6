# services/licensing-service/src/apps/core/tasks.py
"""
Licensing Service Celery Tasks

Periodic maintenance of the license ledger.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def expire_overdue_licenses(self):
    """
    Clear the validity flag on licenses whose expiry has passed.

    Scheduled by celery beat; repeated runs are harmless.
    """
    try:
        from .services import LicenseService

        expired = LicenseService().expire_overdue_licenses()

        logger.info(f"License expiry sweep: {expired} licenses expired")
        return {'expired_count': expired}

    except Exception as e:
        logger.error(f"Error expiring overdue licenses: {e}")
        raise self.retry(countdown=60, exc=e)
