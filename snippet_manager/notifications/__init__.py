"""Outgoing notification delivery."""

from snippet_manager.notifications.email_sender import EmailSender, CeleryEmailSender

__all__ = ["EmailSender", "CeleryEmailSender"]
