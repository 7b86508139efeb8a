import re
import select
import socket
from datetime import datetime, timedelta

import ifaddr

from .const import DISCOVERY_TIMEOUT
from .util import _getLogger

SSDP_TARGET = ("239.255.255.250", 1900)
SSDP_MX = 1
SSDP_BUFSIZE = 65507
ST_ALL = "ssdp:all"
ST_ROOTDEVICE = "upnp:rootdevice"

_LOCATION_RX = re.compile(r"^LOCATION: *(?P<url>\S+)\s*$", re.IGNORECASE | re.MULTILINE)
_ST_RX = re.compile(r"^ST: *(?P<st>\S+)\s*$", re.IGNORECASE | re.MULTILINE)


class ServiceRecord(object):
    """
    A service advertised in answer to an M-SEARCH: its search target
    (`service_type`) and the URL of its device description (`location`).
    """

    def __init__(self, service_type, location):
        self.service_type = service_type
        self.location = location

    def __repr__(self):
        return "<ServiceRecord %r at %r>" % (self.service_type, self.location)

    def __eq__(self, other):
        if not isinstance(other, ServiceRecord):
            return NotImplemented
        return (self.service_type, self.location) == (other.service_type, other.location)

    def __hash__(self):
        return hash((self.service_type, self.location))


def ssdp_request(ssdp_st, ssdp_mx=SSDP_MX):
    """Return request bytes for given st and mx."""
    return "\r\n".join(
        [
            "M-SEARCH * HTTP/1.1",
            "HOST: {}:{}".format(*SSDP_TARGET),
            'MAN: "ssdp:discover"',
            "MX: {:d}".format(ssdp_mx),
            "ST: {}".format(ssdp_st),
            "",
            "",
        ]
    ).encode("utf-8")


def parse_response(response):
    """
    Extract a ServiceRecord from the text of an SSDP response, or return
    None when either the ST or the LOCATION header is missing.
    """
    st = _ST_RX.search(response)
    location = _LOCATION_RX.search(response)
    if st is None or location is None:
        return None
    return ServiceRecord(st.group("st"), location.group("url"))


def get_addresses_ipv4():
    # Ignore localhost and IPv6 addresses
    return list(
        set(
            addr.ip
            for iface in ifaddr.get_adapters()
            for addr in iface.ips
            if addr.is_IPv4 and addr.ip != "127.0.0.1"
        )
    )


def search(search_target=ST_ALL, timeout=DISCOVERY_TIMEOUT, local_addr=""):
    """
    Multicast an M-SEARCH for `search_target` and collect the answers for
    `timeout` seconds. The request goes out of every IPv4 interface, or only
    out of `local_addr` when one is given. Returns a list of unique
    ServiceRecord instances.
    """
    log = _getLogger("ssdp")
    records = []
    sockets = []
    request = ssdp_request(search_target, max(1, int(timeout)))
    stop_wait = datetime.now() + timedelta(seconds=timeout)

    for addr in ([local_addr] if local_addr else get_addresses_ipv4()):
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
            sock.bind((addr, 0))
            sockets.append(sock)
        except socket.error:
            log.debug("Unable to bind SSDP socket to %s", addr, exc_info=True)

    for sock in [s for s in sockets]:
        try:
            sock.sendto(request, SSDP_TARGET)
            sock.setblocking(False)
        except socket.error:
            sockets.remove(sock)
            sock.close()
    try:
        while sockets:
            seconds_left = (stop_wait - datetime.now()).total_seconds()
            if seconds_left <= 0:
                break

            ready = select.select(sockets, [], [], seconds_left)[0]

            for sock in ready:
                try:
                    data, address = sock.recvfrom(SSDP_BUFSIZE)
                    response = data.decode("utf-8")
                except UnicodeDecodeError:
                    log.debug("Ignoring invalid unicode response from %s", address)
                    continue
                except socket.error:
                    log.exception("Socket error while discovering SSDP devices")
                    sockets.remove(sock)
                    sock.close()
                    continue
                record = parse_response(response)
                if record is None:
                    log.debug("Ignoring incomplete SSDP response from %s", address)
                elif record not in records:
                    records.append(record)
    finally:
        for s in sockets:
            s.close()

    return records
