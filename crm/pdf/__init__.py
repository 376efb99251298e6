from .claim_pdf import generate_claim_pdf
from .customer_request_pdf import generate_customer_request_pdf

__all__ = ["generate_claim_pdf", "generate_customer_request_pdf"]
