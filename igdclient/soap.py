import asyncio
import re
from xml.sax.saxutils import escape

import aiohttp
import requests
from lxml import etree

from .const import (
    HTTP_TIMEOUT,
    SOAP_ENVELOPE_NS,
    SOAP_PREFIX,
    SOAP_SUFFIX,
    URN_WANPPPConnection_1,
)
from .errors import (
    DecodeError,
    FaultError,
    ProtocolError,
    TransportError,
    ValidationError,
)
from .util import _getLogger, _localName, _elementChildren


_XML_TEXT_RX = re.compile("[<>&]")
_XML_TEXT_ENTITIES = {"<": "&lt;", ">": "&gt;", "&": "&amp;"}
_XML_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}
_XML_NAME_RX = re.compile(r"[A-Za-z_][\w.\-]*")


def escape_xml_text(value):
    """
    Escape `<`, `>` and `&` in element text. Quotes and apostrophes are
    left alone, so the result is NOT safe inside an attribute value.
    """
    return _XML_TEXT_RX.sub(lambda m: _XML_TEXT_ENTITIES[m.group(0)], value)


class SOAPAction(object):
    """
    The arguments of a single SOAP call, as an ordered sequence of
    (name, value) string pairs. Iteration order is the order on the wire.
    """

    def __init__(self, params=None):
        if params is None:
            params = []
        elif isinstance(params, dict):
            params = params.items()
        self.params = [(name, value) for name, value in params]

    def __repr__(self):
        return "<SOAPAction %s>" % ", ".join("%s=%r" % p for p in self.params)

    def __iter__(self):
        return iter(self.params)

    def __len__(self):
        return len(self.params)

    def add(self, name, value):
        self.params.append((name, value))


def _check_name(kind, name):
    if not isinstance(name, str) or not _XML_NAME_RX.fullmatch(name):
        raise ValidationError("Invalid %s name %r" % (kind, name))


def encode_request(action_name, namespace, action=None):
    """
    Build the SOAP envelope for `action_name` by hand. Some routers 500 on
    envelopes where the default xmlns is the SOAP namespace and gets
    reassigned to the service namespace inside it, so the outer XML is a
    fixed string and the action element is prefixed with 'u:'.
    """
    _check_name("action", action_name)
    parts = [
        SOAP_PREFIX,
        '<u:%s xmlns:u="%s">' % (action_name, escape(namespace, _XML_ATTR_ENTITIES)),
    ]
    for name, value in action or ():
        _check_name("argument", name)
        if not isinstance(value, str):
            raise ValidationError(
                "Value of SOAP argument %r must be a string, got %r" % (name, value)
            )
        parts.append("<%s>%s</%s>" % (name, escape_xml_text(value), name))
    parts.append("</u:%s>" % action_name)
    parts.append(SOAP_SUFFIX)
    return "".join(parts).encode("utf-8")


def _innerXML(node):
    return (node.text or "") + "".join(
        etree.tostring(child, encoding="unicode") for child in node
    )


def _parseFault(fault):
    fields = {}
    for node in _elementChildren(fault):
        fields.setdefault(_localName(node.tag).lower(), node)

    code = (fields["faultcode"].text or "").strip() if "faultcode" in fields else ""
    string = (fields["faultstring"].text or "").strip() if "faultstring" in fields else ""
    detail_node = fields.get("detail")
    if detail_node is None:
        return FaultError(code, string)

    upnp_code = None
    upnp_description = None
    for node in detail_node.iter():
        name = _localName(node.tag)
        if name == "errorCode":
            try:
                upnp_code = int((node.text or "").strip())
            except ValueError:
                pass
        elif name == "errorDescription":
            upnp_description = (node.text or "").strip()
    return FaultError(code, string, _innerXML(detail_node), upnp_code, upnp_description)


def decode_response(status_code, reason, content, response_shape=None):
    """
    Turn an HTTP response into a result. A SOAP fault wins over the HTTP
    status, which wins over decoding the body. With no `response_shape` a 200
    envelope without a fault is a success, whatever its body holds.

    `response_shape` is a namedtuple class whose fields are filled from the
    children of the action response element; missing children decode to "".
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as exc:
        if status_code != 200:
            raise ProtocolError(status_code, reason) from exc
        raise DecodeError("Error decoding SOAP response envelope", content) from exc

    if root.tag != "{%s}Envelope" % SOAP_ENVELOPE_NS:
        if status_code != 200:
            raise ProtocolError(status_code, reason)
        raise DecodeError("Response is not a SOAP envelope", content)

    body = root.find("{%s}Body" % SOAP_ENVELOPE_NS)
    children = _elementChildren(body) if body is not None else []
    for node in children:
        if _localName(node.tag) == "Fault":
            raise _parseFault(node)

    if status_code != 200:
        raise ProtocolError(status_code, reason)

    if response_shape is None:
        return None

    raw = _innerXML(body).encode("utf-8") if body is not None else b""
    if not children or not _localName(children[0].tag).lower().endswith("response"):
        raise DecodeError("Missing action response element", raw)

    values = {}
    for node in _elementChildren(children[0]):
        values[_localName(node.tag)] = node.text or ""
    return response_shape(**{f: values.get(f, "") for f in response_shape._fields})


class SOAP(object):
    """SOAP (Simple Object Access Protocol) implementation
    This class defines a simple SOAP client bound to a single control URL.
    """

    def __init__(
        self,
        url,
        namespace=URN_WANPPPConnection_1,
        timeout=HTTP_TIMEOUT,
        http_auth=None,
        http_headers=None,
        session=None,
    ):
        if not url:
            raise ValidationError("Control URL is empty")
        self.url = url
        self.namespace = namespace
        self.timeout = timeout
        self.http_auth = http_auth
        self.http_headers = http_headers
        self.session = session
        self._log = _getLogger("SOAP")

    def _prepare_request(self, action_name, action):
        body = encode_request(action_name, self.namespace, action)
        headers = {
            "SOAPACTION": '"%s#%s"' % (self.namespace, action_name),
            "CONTENT-TYPE": 'text/xml; charset="utf-8"',
            "CONTENT-LENGTH": str(len(body)),
        }
        if self.http_headers:
            headers.update(self.http_headers)
        self._log.debug(">> %s %s (%s)", self.url, action_name, action)
        return body, headers

    def _handle_response(self, action_name, status_code, reason, content, response_shape):
        self._log.debug("<< %s %s: HTTP %s %r", self.url, action_name, status_code, content)
        return decode_response(status_code, reason, content, response_shape)

    def call(self, action_name, action=None, response_shape=None):
        body, headers = self._prepare_request(action_name, action)
        try:
            resp = requests.post(
                self.url,
                body,
                headers=headers,
                timeout=self.timeout,
                auth=self.http_auth,
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError(
                "Error performing SOAP HTTP request to %s: %s" % (self.url, exc)
            ) from exc
        return self._handle_response(
            action_name, resp.status_code, resp.reason, resp.content, response_shape
        )

    async def async_call(self, action_name, action=None, response_shape=None):
        if self.session is None:
            async with aiohttp.ClientSession() as session:
                return await self._async_call(session, action_name, action, response_shape)
        return await self._async_call(self.session, action_name, action, response_shape)

    async def _async_call(self, session, action_name, action, response_shape):
        body, headers = self._prepare_request(action_name, action)
        auth = self.http_auth
        if auth is not None and not isinstance(auth, aiohttp.BasicAuth):
            auth = aiohttp.BasicAuth(*auth)
        try:
            async with session.post(
                self.url,
                data=body,
                headers=headers,
                auth=auth,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                content = await resp.read()
                status_code, reason = resp.status, resp.reason
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(
                "Error performing SOAP HTTP request to %s: %s" % (self.url, exc)
            ) from exc
        return self._handle_response(action_name, status_code, reason, content, response_shape)
