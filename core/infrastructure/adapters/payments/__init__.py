"""Payment gateway adapters."""
from .paystack_client import PaystackClient, compute_signature, verify_signature

__all__ = ["PaystackClient", "compute_signature", "verify_signature"]
