from .Channel import Channel, ConnectError

__all__ = ["Channel", "ConnectError"]
