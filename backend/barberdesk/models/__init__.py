from .tenancy import Organization
from .auth import User, Profile, UserRole, SessionToken
from .security import SecurityEvent
from .clients import Client
from .catalog import Service
from .inventory import Product, StockMovement
from .scheduling import Appointment
from .finance import Expense
from .integrations import Integration

__all__ = [
    'Organization',
    'User', 'Profile', 'UserRole', 'SessionToken', 'SecurityEvent',
    'Client', 'Service',
    'Product', 'StockMovement',
    'Appointment',
    'Expense',
    'Integration',
]
