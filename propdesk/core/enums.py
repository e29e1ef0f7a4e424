"""Enums for the PropDesk application.

Values are the exact strings stored in the hosted tables (Spanish, lower
case), so they are compared against raw column values throughout.
"""

from enum import Enum


class UserRole(Enum):
    """Role column of the profiles table."""

    ADMIN = "admin"
    AGENT = "agente"
    TENANT = "inquilino"


class OperationType(Enum):
    SALE = "venta"
    RENT = "alquiler"
    SHORT_TERM_RENT = "alquiler_temporal"


class PropertyStatus(Enum):
    AVAILABLE = "disponible"
    RESERVED = "reservada"
    RENTED = "alquilada"
    SOLD = "vendida"
    UNDER_MAINTENANCE = "en_mantenimiento"


class ContractStatus(Enum):
    PENDING = "pendiente"
    ACTIVE = "activo"
    EXPIRED = "vencido"
    CANCELLED = "cancelado"


class PaymentStatus(Enum):
    PENDING = "pendiente"
    PAID = "pagado"
    OVERDUE = "vencido"
    CANCELLED = "cancelado"


class PaymentMethod(Enum):
    CASH = "efectivo"
    TRANSFER = "transferencia"


class MaintenancePriority(Enum):
    LOW = "baja"
    MEDIUM = "media"
    HIGH = "alta"
    URGENT = "urgente"


class MaintenanceStatus(Enum):
    PENDING = "pendiente"
    IN_PROGRESS = "en_proceso"
    COMPLETED = "completado"
    CANCELLED = "cancelado"


class CommissionStatus(Enum):
    PENDING = "pendiente"
    PAID = "pagada"


# Convenience accessors for common values
ROLE_ADMIN = UserRole.ADMIN.value
ROLE_AGENT = UserRole.AGENT.value
ROLE_TENANT = UserRole.TENANT.value

CONTRACT_ACTIVE = ContractStatus.ACTIVE.value
PAYMENT_PENDING = PaymentStatus.PENDING.value
PAYMENT_PAID = PaymentStatus.PAID.value
PAYMENT_OVERDUE = PaymentStatus.OVERDUE.value

RENTAL_OPERATION_TYPES = (OperationType.RENT.value, OperationType.SHORT_TERM_RENT.value)
OCCUPIED_PROPERTY_STATUSES = (PropertyStatus.RENTED.value, PropertyStatus.RESERVED.value)


def values_of(enum_cls: type[Enum]) -> set[str]:
    """Return the raw column values of an enum."""
    return {member.value for member in enum_cls}
