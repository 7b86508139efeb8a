#!/usr/bin/env python
#
# Open a TCP port on the gateway, show the public address and close it again.
#

import logging
import sys

import igdclient

logging.basicConfig(level=logging.DEBUG)

port = int(sys.argv[1]) if len(sys.argv) > 1 else 8080

# Search the local network for a gateway offering the WANIPConnection service.
# This retries a few times as gateways don't always answer the first search.
try:
    device = igdclient.locate()
except igdclient.DiscoveryError as exc:
    print("No UPnP gateway found: %s" % exc)
    print("Maybe try turning on UPnP on your router?")
    sys.exit(1)

print("Gateway at %s, control URL %s" % (device.location, device.control_url))

try:
    device.forward(port, "igdclient example")
except igdclient.FaultError as exc:
    # The gateway refused, e.g. 718 when another host already has the port.
    print("Gateway refused the mapping: %s" % exc)
    sys.exit(1)

print("Reachable at %s:%s" % (device.public_ip(), port))
input("Press enter to remove the mapping...")
device.close(port)
