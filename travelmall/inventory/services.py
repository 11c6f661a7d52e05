"""
Stock adjustment for travel inventory slots.

Both operations read the row under a row lock, check, and write inside one
database transaction, so concurrent bookings cannot oversell a slot.
"""
import logging

from django.db import transaction, DatabaseError

from .models import Inventory

logger = logging.getLogger(__name__)


def decrease_inventory(inventory_id, quantity):
    """
    Move `quantity` seats from available to reserved.

    Returns:
        True on success; False if the slot is missing, the quantity is not
        positive, or fewer than `quantity` seats are available. The row is
        left unchanged whenever False is returned.
    """
    if quantity is None or quantity <= 0:
        logger.warning(f"Rejected inventory decrease for {inventory_id}: invalid quantity {quantity}")
        return False

    try:
        with transaction.atomic():
            try:
                inventory = Inventory.objects.select_for_update().get(pk=inventory_id)
            except Inventory.DoesNotExist:
                logger.warning(f"Inventory {inventory_id} not found")
                return False

            if inventory.available_stock < quantity:
                logger.warning(
                    f"Insufficient stock for inventory {inventory_id}: "
                    f"requested {quantity}, available {inventory.available_stock}"
                )
                return False

            inventory.available_stock -= quantity
            inventory.reserved_stock += quantity
            inventory.save(update_fields=['available_stock', 'reserved_stock', 'updated_at'])
    except DatabaseError as e:
        logger.error(f"Inventory decrease failed for {inventory_id}: {str(e)}")
        return False

    logger.info(f"Decreased inventory {inventory_id} by {quantity}")
    return True


def restore_inventory(inventory_id, quantity):
    """
    Return `quantity` seats to available stock.

    Reserved stock is reduced by the same amount but never below zero.
    """
    if quantity is None or quantity <= 0:
        logger.warning(f"Rejected inventory restore for {inventory_id}: invalid quantity {quantity}")
        return False

    try:
        with transaction.atomic():
            try:
                inventory = Inventory.objects.select_for_update().get(pk=inventory_id)
            except Inventory.DoesNotExist:
                logger.warning(f"Inventory {inventory_id} not found")
                return False

            inventory.available_stock += quantity
            inventory.reserved_stock = max(0, inventory.reserved_stock - quantity)
            inventory.save(update_fields=['available_stock', 'reserved_stock', 'updated_at'])
    except DatabaseError as e:
        logger.error(f"Inventory restore failed for {inventory_id}: {str(e)}")
        return False

    logger.info(f"Restored inventory {inventory_id} by {quantity}")
    return True
