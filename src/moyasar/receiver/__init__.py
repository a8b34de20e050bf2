from .server import Rejection, WebhookReceiverServer

__all__ = ["WebhookReceiverServer", "Rejection"]
