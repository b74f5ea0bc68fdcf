from .sms_service import HttpSmsService

__all__ = ["HttpSmsService"]
