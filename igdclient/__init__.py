# Copyright (c) 2012-2016, Ferry Boender <ferry.boender@gmail.com>
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
This module lets a host find the UPnP Internet Gateway Device (IGD) of its
local network and ask it for port forwardings. It implements just enough of
SSDP (Simple Service Discovery Protocol) to find the gateway and a minimal
SOAP (Simple Object Access Protocol) client to talk to its WANIPConnection
service.

The usual flow is:

- Locate the gateway.

  locate() multicasts an SSDP M-SEARCH, looks for a device advertising the
  WANIPConnection:1 service and derives its control URL from the LOCATION
  header. Discovery is retried a few times, as gateways don't always answer
  the first search. If you already know the control URL you can skip this
  step and instantiate a Device directly.

- Call actions on the gateway.

  A Device offers public_ip(), forward(port, description) and close(port).
  Each one is a single SOAP call to the control URL. The lower level
  functions in the igd module take the full set of WANIPConnection
  arguments.

Errors are raised as subclasses of UPNPError, so callers can tell a gateway
that refused (FaultError) from one that couldn't be reached (TransportError)
or found (DiscoveryError).

------------------------------------------------------------------------------
import igdclient

device = igdclient.locate()
print("Public IP: %s" % device.public_ip())
device.forward(8080, "my service")
...
device.close(8080)
------------------------------------------------------------------------------

Useful Links:

* http://upnp.org/specs/arch/UPnP-arch-DeviceArchitecture-v1.1.pdf
* http://upnp.org/specs/gw/UPnP-gw-WANIPConnection-v1-Service.pdf
"""
from igdclient import const, errors, igd, marshal, soap, ssdp, upnp, util  # noqa: F401
from .errors import (
    UPNPError,
    ValidationError,
    TransportError,
    ProtocolError,
    FaultError,
    DecodeError,
    DiscoveryError,
    DiscoveryCancelled,
    AddressParseError,
    NetworkUnavailableError,
)
from .upnp import Device, AsyncDevice, locate, get_internal_ip

__all__ = [
    "Device", "AsyncDevice", "locate", "get_internal_ip", "UPNPError",
    "ValidationError", "TransportError", "ProtocolError", "FaultError",
    "DecodeError", "DiscoveryError", "DiscoveryCancelled", "AddressParseError",
    "NetworkUnavailableError",
]
