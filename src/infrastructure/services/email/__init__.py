from .verification_email_service import VerificationEmailService

__all__ = ["VerificationEmailService"]
