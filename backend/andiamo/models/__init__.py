from .catalog import Event, EventPass
from .ambassadors import Ambassador
from .orders import Order, OrderPass, OrderLog, OrderSequence
from .auth import Admin
from .settings import SiteContent, PaymentOption
from .messaging import SmsLog

__all__ = [
    'Event', 'EventPass',
    'Ambassador',
    'Order', 'OrderPass', 'OrderLog', 'OrderSequence',
    'Admin',
    'SiteContent', 'PaymentOption',
    'SmsLog',
]
