HTTP_TIMEOUT = 10

DISCOVERY_ATTEMPTS = 3
DISCOVERY_DELAY = 0.5
DISCOVERY_TIMEOUT = 1

# Any routable address will do, nothing is sent to it.
PROBE_ADDRESS = ("8.8.8.8", 80)

CONTROL_PATH = "/ctl/IPConn"

URN_LANDevice_1 = "urn:schemas-upnp-org:device:LANDevice:1"
URN_WANConnectionDevice_1 = "urn:schemas-upnp-org:device:WANConnectionDevice:1"
URN_WANDevice_1 = "urn:schemas-upnp-org:device:WANDevice:1"
URN_WANIPConnection_1 = "urn:schemas-upnp-org:service:WANIPConnection:1"
URN_WANPPPConnection_1 = "urn:schemas-upnp-org:service:WANPPPConnection:1"

ADD_PORT_MAPPING = "AddPortMapping"
DELETE_PORT_MAPPING = "DeletePortMapping"
GET_EXTERNAL_IP_ADDRESS = "GetExternalIPAddress"

PROTOCOLS = ("TCP", "UDP")

SOAP_ENVELOPE_NS = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_ENCODING_STYLE = "http://schemas.xmlsoap.org/soap/encoding/"
SOAP_PREFIX = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<s:Envelope xmlns:s="%s" s:encodingStyle="%s"><s:Body>'
    % (SOAP_ENVELOPE_NS, SOAP_ENCODING_STYLE)
)
SOAP_SUFFIX = "</s:Body></s:Envelope>"
