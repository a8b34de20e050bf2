from .pipeline import WebhookProcessor, parse_webhook_payload, secrets_match

__all__ = ["WebhookProcessor", "parse_webhook_payload", "secrets_match"]
