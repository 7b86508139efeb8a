import socket
import time

from . import igd, ssdp
from .const import (
    CONTROL_PATH,
    DISCOVERY_ATTEMPTS,
    DISCOVERY_DELAY,
    DISCOVERY_TIMEOUT,
    HTTP_TIMEOUT,
    PROBE_ADDRESS,
    URN_WANIPConnection_1,
    URN_WANPPPConnection_1,
)
from .errors import (
    AddressParseError,
    DiscoveryCancelled,
    DiscoveryError,
    NetworkUnavailableError,
    ValidationError,
)
from .util import _getLogger


def get_internal_ip(probe_address=PROBE_ADDRESS):
    """
    Return the local IP address the host would use to reach `probe_address`.
    Connecting a UDP socket only selects a route, no packet is sent.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(probe_address)
            return sock.getsockname()[0]
    except socket.error as exc:
        raise NetworkUnavailableError(
            "Unable to determine the outbound local IP address: %s" % exc
        ) from exc


def parse_location(location):
    """
    Return the 'host[:port]' part of a location of the form
    'http://host[:port]/path'. Raises AddressParseError for anything else.
    """
    parts = location.split("http://")
    if len(parts) != 2:
        raise AddressParseError(location)
    host_path = parts[1].split("/", 1)
    if len(host_path) != 2 or not host_path[0]:
        raise AddressParseError(location)
    return host_path[0]


def _find_location(records):
    for record in records:
        if record.service_type == URN_WANIPConnection_1:
            return record.location
    return None


def locate(
    search=None,
    attempts=DISCOVERY_ATTEMPTS,
    delay=DISCOVERY_DELAY,
    search_timeout=DISCOVERY_TIMEOUT,
    cancel=None,
    device_class=None,
    **kwargs
):
    """
    Find the Internet Gateway Device offering WANIPConnection:1 on the local
    network and return a `Device` (or `device_class`) bound to its control
    URL. Remaining keyword arguments are passed to the device.

    `search(search_target, timeout, local_addr)` is the discovery function,
    `ssdp.search` by default. It is tried `attempts` times, `delay` seconds
    apart. A `threading.Event` passed as `cancel` aborts the wait between
    attempts with DiscoveryCancelled.

    Example:

    >>> device = locate()
    >>> device.control_url
    'http://192.168.1.1:1780/ctl/IPConn'
    """
    log = _getLogger("locate")
    if search is None:
        search = ssdp.search
    if device_class is None:
        device_class = Device

    for attempt in range(1, attempts + 1):
        if cancel is not None and cancel.is_set():
            raise DiscoveryCancelled("Gateway discovery was cancelled")

        try:
            records = search(ssdp.ST_ALL, search_timeout, "")
        except socket.error as exc:
            raise DiscoveryError("SSDP search failed: %s" % exc) from exc

        location = _find_location(records)
        if location is not None:
            host = parse_location(location)
            control_url = "http://" + host + CONTROL_PATH
            log.debug("Found gateway at %r, control URL %r", location, control_url)
            return device_class(host, control_url, **kwargs)

        log.debug(
            "No %s among %d records (attempt %d of %d)",
            URN_WANIPConnection_1,
            len(records),
            attempt,
            attempts,
        )
        if attempt < attempts:
            if cancel is None:
                time.sleep(delay)
            elif cancel.wait(delay):
                raise DiscoveryCancelled("Gateway discovery was cancelled")

    raise DiscoveryError("No available internet gateway devices")


class Device(object):
    """
    Internet Gateway Device, reached through the control URL of its
    WANIPConnection service. `location` is the gateway's 'host[:port]'.
    Holds no connection, every call makes its own HTTP request.

    Example:

    >>> device = Device('192.168.1.1:1780', 'http://192.168.1.1:1780/ctl/IPConn')
    >>> device.forward(8080, 'my service')
    >>> device.public_ip()
    '203.0.113.5'
    >>> device.close(8080)
    """

    def __init__(
        self,
        location,
        control_url,
        namespace=URN_WANPPPConnection_1,
        timeout=HTTP_TIMEOUT,
        http_auth=None,
        http_headers=None,
        probe_address=PROBE_ADDRESS,
    ):
        if not control_url:
            raise ValidationError("Control URL is empty")
        self._location = location
        self._control_url = control_url
        self.namespace = namespace
        self.timeout = timeout
        self.http_auth = http_auth
        self.http_headers = http_headers
        self.probe_address = probe_address
        self._log = _getLogger("Device")

    def __repr__(self):
        return "<%s '%s'>" % (self.__class__.__name__, self._location)

    @property
    def location(self):
        return self._location

    @property
    def control_url(self):
        return self._control_url

    def _soap_kwargs(self):
        return dict(
            namespace=self.namespace,
            timeout=self.timeout,
            http_auth=self.http_auth,
            http_headers=self.http_headers,
        )

    def public_ip(self):
        return igd.get_external_ip_address(self._control_url, **self._soap_kwargs())

    def forward(self, port, description):
        """
        Forward TCP `port` on the gateway to the same port on this host,
        without a lease expiry.
        """
        internal_ip = get_internal_ip(self.probe_address)
        self._log.debug("Forwarding TCP port %s to %s (%r)", port, internal_ip, description)
        igd.add_port_mapping(
            "",
            internal_ip,
            "TCP",
            description,
            port,
            port,
            True,
            0,
            self._control_url,
            **self._soap_kwargs()
        )

    def close(self, port):
        self._log.debug("Removing forwarding of TCP port %s", port)
        igd.delete_port_mapping("", port, "TCP", self._control_url, **self._soap_kwargs())


class AsyncDevice(Device):
    """
    Same as Device, with coroutine methods. Requests go through `session`
    if one is given, otherwise through a short-lived aiohttp session per
    call.
    """

    def __init__(self, location, control_url, session=None, **kwargs):
        super().__init__(location, control_url, **kwargs)
        self.session = session

    def _soap_kwargs(self):
        kwargs = super()._soap_kwargs()
        kwargs["session"] = self.session
        return kwargs

    async def public_ip(self):
        return await igd.async_get_external_ip_address(
            self._control_url, **self._soap_kwargs()
        )

    async def forward(self, port, description):
        internal_ip = get_internal_ip(self.probe_address)
        self._log.debug("Forwarding TCP port %s to %s (%r)", port, internal_ip, description)
        await igd.async_add_port_mapping(
            "",
            internal_ip,
            "TCP",
            description,
            port,
            port,
            True,
            0,
            self._control_url,
            **self._soap_kwargs()
        )

    async def close(self, port):
        self._log.debug("Removing forwarding of TCP port %s", port)
        await igd.async_delete_port_mapping(
            "", port, "TCP", self._control_url, **self._soap_kwargs()
        )
