"""WhatsApp session management and message ingestion into Supabase."""

from .engine import WhatsAppEngine

__all__ = ["WhatsAppEngine"]
