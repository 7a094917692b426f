"""HTTP clients for external collaborators."""
from .tracking_client import WebhookTrackingReporter

__all__ = ["WebhookTrackingReporter"]
