from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.scheduling.models import Shift
from apps.stores.models import StoreManager

logger = logging.getLogger(__name__)


@transaction.atomic
def delete_account(user) -> None:
    """
    Deletes the account after stamping the user's name onto their shifts.

    Refused while the user is a primary manager anywhere; ownership has to
    be transferred first.
    """
    if StoreManager.objects.filter(manager=user, is_primary=True).exists():
        logger.warning("user=%s tried to delete account while primary manager", user.id)
        raise ValidationError(
            "You are a primary manager of one or more stores. "
            "Please transfer ownership before deleting your account."
        )
    name = user.display_name
    if name:
        Shift.objects.filter(employee=user).update(original_employee_name=name)
    user_id = user.id
    user.delete()
    logger.info("user=%s deleted their account", user_id)
