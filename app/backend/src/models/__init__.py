"""ORM models exposed for easy imports."""

from .class_template import ClassTemplate
from .client import Client
from .invoice import Invoice, InvoiceStatus
from .invoice_sequence import InvoiceSequence
from .line_item import InvoiceLineItem
from .time_entry import TimeEntry, TimeEntryStatus
from .user_profile import PROFILE_ID, UserProfile

__all__ = [
    "ClassTemplate",
    "Client",
    "Invoice",
    "InvoiceLineItem",
    "InvoiceSequence",
    "InvoiceStatus",
    "PROFILE_ID",
    "TimeEntry",
    "TimeEntryStatus",
    "UserProfile",
]
