"""Client proxy for the host bridge HTTP surface."""
from ifc_bridge.client.proxy import ClientResult, ExportedFile, HostBridgeClient
from ifc_bridge.client.state import ConnectionState, Notification, NotificationLevel, Notifier

__all__ = [
    "ClientResult",
    "ConnectionState",
    "ExportedFile",
    "HostBridgeClient",
    "Notification",
    "NotificationLevel",
    "Notifier",
]
