"""
Actions of the WANIPConnection:1 service used to manage port mappings on an
Internet Gateway Device. Every function takes the control URL last and passes
any extra keyword arguments (namespace, timeout, http_auth, http_headers and,
for the async variants, session) on to `soap.SOAP`.
"""
from collections import namedtuple

from .const import (
    ADD_PORT_MAPPING,
    DELETE_PORT_MAPPING,
    GET_EXTERNAL_IP_ADDRESS,
    PROTOCOLS,
)
from .errors import ValidationError
from .marshal import marshal_boolean, marshal_ui2, marshal_ui4
from .soap import SOAP, SOAPAction


ExternalIPAddress = namedtuple("ExternalIPAddress", ["NewExternalIPAddress"])


def _check_control_url(control_url):
    if not control_url:
        raise ValidationError("Control URL is empty")


def _check_protocol(protocol):
    if protocol not in PROTOCOLS:
        raise ValidationError(
            "Protocol must be one of %s, got %r" % (", ".join(PROTOCOLS), protocol)
        )


def add_port_mapping_action(
    remote_host,
    internal_client,
    protocol,
    description,
    external_port,
    internal_port,
    enabled,
    lease_duration,
):
    """
    Arguments of AddPortMapping, in the order the WANIPConnection:1 service
    description lists them.
    """
    _check_protocol(protocol)
    return SOAPAction(
        [
            ("NewRemoteHost", remote_host),
            ("NewExternalPort", marshal_ui2(external_port)),
            ("NewProtocol", protocol),
            ("NewInternalPort", marshal_ui2(internal_port)),
            ("NewInternalClient", internal_client),
            ("NewEnabled", marshal_boolean(enabled)),
            ("NewPortMappingDescription", description),
            ("NewLeaseDuration", marshal_ui4(lease_duration)),
        ]
    )


def delete_port_mapping_action(remote_host, external_port, protocol):
    _check_protocol(protocol)
    return SOAPAction(
        [
            ("NewRemoteHost", remote_host),
            ("NewExternalPort", marshal_ui2(external_port)),
            ("NewProtocol", protocol),
        ]
    )


def add_port_mapping(
    remote_host,
    internal_client,
    protocol,
    description,
    external_port,
    internal_port,
    enabled,
    lease_duration,
    control_url,
    **kwargs
):
    """
    Forward `external_port` on the gateway to `internal_client:internal_port`.
    A `lease_duration` of 0 asks for a mapping without expiry.
    """
    _check_control_url(control_url)
    action = add_port_mapping_action(
        remote_host,
        internal_client,
        protocol,
        description,
        external_port,
        internal_port,
        enabled,
        lease_duration,
    )
    SOAP(control_url, **kwargs).call(ADD_PORT_MAPPING, action)


def delete_port_mapping(remote_host, external_port, protocol, control_url, **kwargs):
    _check_control_url(control_url)
    action = delete_port_mapping_action(remote_host, external_port, protocol)
    SOAP(control_url, **kwargs).call(DELETE_PORT_MAPPING, action)


def get_external_ip_address(control_url, **kwargs):
    """
    Return the public IP address of the gateway as a string.
    """
    _check_control_url(control_url)
    response = SOAP(control_url, **kwargs).call(
        GET_EXTERNAL_IP_ADDRESS, response_shape=ExternalIPAddress
    )
    return response.NewExternalIPAddress


async def async_add_port_mapping(
    remote_host,
    internal_client,
    protocol,
    description,
    external_port,
    internal_port,
    enabled,
    lease_duration,
    control_url,
    **kwargs
):
    _check_control_url(control_url)
    action = add_port_mapping_action(
        remote_host,
        internal_client,
        protocol,
        description,
        external_port,
        internal_port,
        enabled,
        lease_duration,
    )
    await SOAP(control_url, **kwargs).async_call(ADD_PORT_MAPPING, action)


async def async_delete_port_mapping(
    remote_host, external_port, protocol, control_url, **kwargs
):
    _check_control_url(control_url)
    action = delete_port_mapping_action(remote_host, external_port, protocol)
    await SOAP(control_url, **kwargs).async_call(DELETE_PORT_MAPPING, action)


async def async_get_external_ip_address(control_url, **kwargs):
    _check_control_url(control_url)
    response = await SOAP(control_url, **kwargs).async_call(
        GET_EXTERNAL_IP_ADDRESS, response_shape=ExternalIPAddress
    )
    return response.NewExternalIPAddress
