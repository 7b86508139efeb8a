class UPNPError(Exception):
    """
    Base class for every error raised by this package.
    """

    pass


class ValidationError(UPNPError):
    """
    An argument didn't validate before being put on the wire.
    """

    pass


class TransportError(UPNPError):
    """
    The HTTP exchange with the gateway failed at the network level.
    """

    pass


class ProtocolError(UPNPError):
    """
    The gateway answered with a non-200 status and no SOAP fault.
    """

    def __init__(self, status_code, reason=None):
        super(ProtocolError, self).__init__(
            "SOAP request got HTTP %s %s" % (status_code, reason or "")
        )
        self.status_code = status_code
        self.reason = reason


class FaultError(UPNPError):
    """
    The gateway answered with a SOAP fault. `detail` is the raw inner XML of
    the fault's detail element. If that detail holds a UPnPError, its code
    and description are exposed as `upnp_error_code` and
    `upnp_error_description`.
    """

    def __init__(
        self,
        code,
        string,
        detail="",
        upnp_error_code=None,
        upnp_error_description=None,
    ):
        super(FaultError, self).__init__(code, string)
        self.code = code
        self.string = string
        self.detail = detail
        self.upnp_error_code = upnp_error_code
        self.upnp_error_description = upnp_error_description

    def __str__(self):
        if self.upnp_error_code is None:
            return "SOAP fault %s: %s" % (self.code, self.string)
        return "SOAP fault %s: %s (UPnP error %s: %s)" % (
            self.code,
            self.string,
            self.upnp_error_code,
            self.upnp_error_description or self.description,
        )

    @property
    def description(self):
        """
        Standard description of the UPnP error code, if there is one.
        """
        if self.upnp_error_code is None:
            return None
        try:
            return ERR_CODE_DESCRIPTIONS[self.upnp_error_code]
        except KeyError:
            return None


class DecodeError(UPNPError):
    """
    The response body couldn't be decoded. `raw` holds the offending bytes.
    """

    def __init__(self, message, raw=b""):
        super(DecodeError, self).__init__("%s: %r" % (message, raw))
        self.raw = raw


class DiscoveryError(UPNPError):
    """
    No usable Internet Gateway Device was found.
    """

    pass


class DiscoveryCancelled(DiscoveryError):
    pass


class AddressParseError(UPNPError):
    """
    A discovered location isn't of the form 'http://host[:port]/path'.
    """

    def __init__(self, location):
        super(AddressParseError, self).__init__("Invalid address %r" % location)
        self.location = location


class NetworkUnavailableError(UPNPError):
    """
    The outbound local IP address couldn't be determined.
    """

    pass


class ErrorCodeDescriptions(object):
    """
    Look up the description of a UPnP error code, as found in the
    errorCode element of a SOAP fault. Codes without a dedicated entry
    fall back to the description of the range they belong to.
    """

    _descriptions = {
        401: "No action by that name at this service.",
        402: (
            "Could be any of the following: not enough in args, args in the "
            "wrong order, one or more in args are of the wrong data type."
        ),
        403: "Out of Sync.",
        501: "May be returned in current state of service prevents invoking that action.",
        600: "The argument value is invalid.",
        601: (
            "An argument value is less than the minimum or more than the "
            "maximum value of the allowedValueRange, or is not in the "
            "allowedValueList."
        ),
        602: "The requested action is optional and is not implemented by the device.",
        603: "The device does not have sufficient memory available to complete the action.",
        604: "The device has encountered an error condition which it cannot resolve itself.",
        605: "A string argument is too long for the device to handle properly.",
        714: "The specified value does not exist in the array.",
        715: "The source IP address cannot be wild-carded.",
        716: "The external port cannot be wild-carded.",
        718: "The port mapping entry specified conflicts with a mapping assigned previously to another client.",
        724: "Internal and External port values must be the same.",
        725: "The NAT implementation only supports permanent lease times on port mappings.",
        726: "RemoteHost must be a wildcard and cannot be a specific IP address or DNS name.",
        727: "ExternalPort must be a wildcard and cannot be a specific port value.",
    }

    _ranges = (
        (606, 612, "These ErrorCodes are reserved for UPnP DeviceSecurity."),
        (613, 699, "Common action errors. Defined by UPnP Forum Technical Committee."),
        (700, 799, "Action-specific errors defined by UPnP Forum working committee."),
        (
            800,
            899,
            "Action-specific errors for non-standard actions. Defined by UPnP vendor.",
        ),
    )

    def __getitem__(self, key):
        if isinstance(key, bool) or not isinstance(key, int):
            raise KeyError("'key' must be an integer")
        try:
            return self._descriptions[key]
        except KeyError:
            pass
        for low, high, description in self._ranges:
            if low <= key <= high:
                return description
        raise KeyError(key)

    def __contains__(self, key):
        try:
            self[key]
        except KeyError:
            return False
        return True


ERR_CODE_DESCRIPTIONS = ErrorCodeDescriptions()
