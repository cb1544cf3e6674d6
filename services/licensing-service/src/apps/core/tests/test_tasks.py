# services/licensing-service/src/apps/core/tests/test_tasks.py
"""
Licensing Service Task Tests
"""

import pytest
from datetime import timedelta
from unittest.mock import patch

from celery.exceptions import Retry
from django.utils import timezone

from apps.core.tasks import expire_overdue_licenses


@pytest.mark.django_db
class TestExpireOverdueLicensesTask:
    """Tests for the periodic expiry sweep."""

    def test_expires_lapsed_licenses(self, player_world, license_types, grant):
        lapsed = grant(player_world, license_types['NIGHT'], expires_at=timezone.now() - timedelta(minutes=5))
        grant(player_world, license_types['PPL'])

        result = expire_overdue_licenses.apply().get()

        assert result == {'expired_count': 1}
        lapsed.refresh_from_db()
        assert lapsed.is_valid is False

    def test_nothing_to_expire(self, db):
        assert expire_overdue_licenses.apply().get() == {'expired_count': 0}

    def test_retries_on_error(self, db):
        with patch(
            'apps.core.services.LicenseService.expire_overdue_licenses',
            side_effect=RuntimeError('database unavailable')
        ), patch.object(expire_overdue_licenses, 'retry', side_effect=Retry()) as retry:
            with pytest.raises(Retry):
                expire_overdue_licenses()

        assert retry.call_args.kwargs['countdown'] == 60
