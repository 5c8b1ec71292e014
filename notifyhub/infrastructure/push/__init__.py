"""Realtime push helpers for the infrastructure layer."""

from .gateway import (
    DisabledSubscription,
    PushGateway,
    PushSubscription,
    PushTransport,
    TransportFactory,
    build_default_transport,
)
from .relay import ChannelRelay, ChannelSubscription, serialize_payload
from .serializers import serialize_notification

__all__ = [
    "ChannelRelay",
    "ChannelSubscription",
    "DisabledSubscription",
    "PushGateway",
    "PushSubscription",
    "PushTransport",
    "TransportFactory",
    "build_default_transport",
    "serialize_notification",
    "serialize_payload",
]
