from .customer_forms import CustomerForm
from .customer_request_forms import CustomerRequestForm
from .item_forms import BatchEditForm
from .lead_forms import LeadEditForm
from .user_forms import UserEditForm

__all__ = [
    "BatchEditForm",
    "CustomerForm",
    "CustomerRequestForm",
    "LeadEditForm",
    "UserEditForm",
]
