from legaldesk.accounts.models import AttorneyProfile, ClientProfile, UserProfile
from legaldesk.activity.models import ActivityRecord
from legaldesk.cases.models import Case
from legaldesk.catalog.models import LegalService, PracticeArea
from legaldesk.complaints.models import Complaint
from legaldesk.consultations.models import ConsultationBooking
from legaldesk.invoices.models import Invoice
from legaldesk.platform.sequences import SequenceCounter
from legaldesk.registrations.models import ServiceRegistration
from legaldesk.subscriptions.models import Subscription

__all__ = [
    "ActivityRecord",
    "AttorneyProfile",
    "Case",
    "ClientProfile",
    "Complaint",
    "ConsultationBooking",
    "Invoice",
    "LegalService",
    "PracticeArea",
    "SequenceCounter",
    "ServiceRegistration",
    "Subscription",
    "UserProfile",
]
