from .connect import connect
from .options import ClientOptions
from .session import ClientSession
from .settings import NsmSettings
from .udp import UdpTransport

__all__ = ["ClientOptions", "ClientSession", "NsmSettings", "UdpTransport", "connect"]
