# Import all models here
from .application import Application
from .resident import Resident
from .payment import Payment
from .notification import Notification
from .document import Document
from .incident import Incident
from .staff import StaffUser

__all__ = [
    "Application", "Resident", "Payment", "Notification",
    "Document", "Incident", "StaffUser"
]
