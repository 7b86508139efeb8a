import asyncio
import socket
import threading
import unittest

import mock

import igdclient as igd
from igdclient.ssdp import ServiceRecord
from igdclient.upnp import AsyncDevice, Device, get_internal_ip, locate, parse_location
from tests.const import TEST_CONTROL_URL

WANIP = "urn:schemas-upnp-org:service:WANIPConnection:1"
WANPPP = "urn:schemas-upnp-org:service:WANPPPConnection:1"
ROOTDEVICE = "upnp:rootdevice"


class TestLocate(unittest.TestCase):
    @mock.patch("igdclient.upnp.time.sleep")
    def test_no_gateway(self, mock_sleep):
        """
        Three searches, a 500ms pause between each, then a DiscoveryError.
        """
        search = mock.Mock(return_value=[ServiceRecord(ROOTDEVICE, "http://10.0.0.5/d.xml")])
        self.assertRaises(igd.DiscoveryError, locate, search)
        self.assertEqual(search.call_count, 3)
        search.assert_called_with("ssdp:all", 1, "")
        self.assertEqual(mock_sleep.call_args_list, [mock.call(0.5), mock.call(0.5)])

    @mock.patch("igdclient.upnp.time.sleep")
    def test_empty_results(self, mock_sleep):
        search = mock.Mock(return_value=[])
        with self.assertRaises(igd.DiscoveryError) as cm:
            locate(search)
        self.assertNotIsInstance(cm.exception, igd.DiscoveryCancelled)
        self.assertEqual(search.call_count, 3)
        self.assertEqual(mock_sleep.call_count, 2)

    @mock.patch("igdclient.upnp.time.sleep")
    def test_found(self, mock_sleep):
        search = mock.Mock(
            return_value=[ServiceRecord(WANIP, "http://192.168.1.1:1780/desc.xml")]
        )
        device = locate(search)
        self.assertIsInstance(device, Device)
        self.assertEqual(device.control_url, "http://192.168.1.1:1780/ctl/IPConn")
        self.assertEqual(device.location, "192.168.1.1:1780")
        self.assertEqual(search.call_count, 1)
        mock_sleep.assert_not_called()

    @mock.patch("igdclient.upnp.time.sleep")
    def test_found_on_retry(self, mock_sleep):
        search = mock.Mock(
            side_effect=[
                [ServiceRecord(WANPPP, "http://192.168.1.1:1780/desc.xml")],
                [ServiceRecord(WANIP, "http://192.168.1.254/igd/desc.xml")],
            ]
        )
        device = locate(search)
        self.assertEqual(device.control_url, "http://192.168.1.254/ctl/IPConn")
        self.assertEqual(search.call_count, 2)
        self.assertEqual(mock_sleep.call_count, 1)

    def test_first_match_wins(self):
        search = mock.Mock(
            return_value=[
                ServiceRecord(ROOTDEVICE, "http://10.0.0.5/d.xml"),
                ServiceRecord(WANIP, "http://192.168.1.1:1780/desc.xml"),
                ServiceRecord(WANIP, "http://192.168.1.2:1780/desc.xml"),
            ]
        )
        self.assertEqual(locate(search).location, "192.168.1.1:1780")

    @mock.patch("igdclient.upnp.time.sleep")
    def test_bad_location_not_retried(self, mock_sleep):
        search = mock.Mock(return_value=[ServiceRecord(WANIP, "https://192.168.1.1/desc.xml")])
        with self.assertRaises(igd.AddressParseError) as cm:
            locate(search)
        self.assertEqual(cm.exception.location, "https://192.168.1.1/desc.xml")
        self.assertEqual(search.call_count, 1)
        mock_sleep.assert_not_called()

    def test_search_failure(self):
        exc = socket.error("Network is unreachable")
        search = mock.Mock(side_effect=exc)
        with self.assertRaises(igd.DiscoveryError) as cm:
            locate(search)
        self.assertIs(cm.exception.__cause__, exc)
        self.assertEqual(search.call_count, 1)

    def test_settings(self):
        search = mock.Mock(
            return_value=[ServiceRecord(WANIP, "http://192.168.1.1:1780/desc.xml")]
        )
        device = locate(search, search_timeout=3, namespace=WANIP, timeout=5)
        search.assert_called_with("ssdp:all", 3, "")
        self.assertEqual(device.namespace, WANIP)
        self.assertEqual(device.timeout, 5)

    def test_device_class(self):
        search = mock.Mock(
            return_value=[ServiceRecord(WANIP, "http://192.168.1.1:1780/desc.xml")]
        )
        self.assertIsInstance(locate(search, device_class=AsyncDevice), AsyncDevice)

    @mock.patch("igdclient.upnp.ssdp.search")
    def test_default_search(self, mock_search):
        mock_search.return_value = [ServiceRecord(WANIP, "http://192.168.1.1:1780/desc.xml")]
        locate()
        mock_search.assert_called_with("ssdp:all", 1, "")

    def test_cancelled_before_search(self):
        cancel = threading.Event()
        cancel.set()
        search = mock.Mock(return_value=[])
        self.assertRaises(igd.DiscoveryCancelled, locate, search, cancel=cancel)
        search.assert_not_called()

    @mock.patch("igdclient.upnp.time.sleep")
    def test_cancelled_while_waiting(self, mock_sleep):
        cancel = mock.Mock()
        cancel.is_set.return_value = False
        cancel.wait.return_value = True
        search = mock.Mock(return_value=[])
        self.assertRaises(igd.DiscoveryCancelled, locate, search, cancel=cancel)
        self.assertEqual(search.call_count, 1)
        cancel.wait.assert_called_once_with(0.5)
        mock_sleep.assert_not_called()

    def test_cancel_event_unset(self):
        """
        An event that is never set only replaces the sleeps.
        """
        cancel = mock.Mock()
        cancel.is_set.return_value = False
        cancel.wait.return_value = False
        search = mock.Mock(return_value=[])
        with self.assertRaises(igd.DiscoveryError) as cm:
            locate(search, cancel=cancel)
        self.assertNotIsInstance(cm.exception, igd.DiscoveryCancelled)
        self.assertEqual(search.call_count, 3)
        self.assertEqual(cancel.wait.call_count, 2)


class TestParseLocation(unittest.TestCase):
    def test_valid(self):
        self.assertEqual(parse_location("http://192.168.1.1:1780/desc.xml"), "192.168.1.1:1780")
        self.assertEqual(parse_location("http://192.168.1.1/a/b/desc.xml"), "192.168.1.1")
        self.assertEqual(parse_location("http://router.lan/"), "router.lan")

    def test_invalid(self):
        for location in (
            "",
            "192.168.1.1:1780/desc.xml",
            "https://192.168.1.1/desc.xml",
            "http://192.168.1.1:1780",
            "http:///desc.xml",
            "http://http://192.168.1.1/desc.xml",
        ):
            self.assertRaises(igd.AddressParseError, parse_location, location)


class TestInternalIP(unittest.TestCase):
    @mock.patch("igdclient.upnp.socket.socket")
    def test_internal_ip(self, mock_socket):
        sock = mock_socket.return_value.__enter__.return_value
        sock.getsockname.return_value = ("192.168.1.10", 54321)
        self.assertEqual(get_internal_ip(), "192.168.1.10")
        mock_socket.assert_called_with(socket.AF_INET, socket.SOCK_DGRAM)
        sock.connect.assert_called_with(("8.8.8.8", 80))
        sock.send.assert_not_called()
        sock.sendto.assert_not_called()

    @mock.patch("igdclient.upnp.socket.socket")
    def test_network_unavailable(self, mock_socket):
        exc = OSError(101, "Network is unreachable")
        mock_socket.return_value.__enter__.return_value.connect.side_effect = exc
        with self.assertRaises(igd.NetworkUnavailableError) as cm:
            get_internal_ip(("203.0.113.1", 9))
        self.assertIs(cm.exception.__cause__, exc)


class TestDevice(unittest.TestCase):
    def setUp(self):
        self.device = Device("192.168.1.1:1780", TEST_CONTROL_URL)
        self.soap_kwargs = dict(
            namespace=WANPPP, timeout=igd.const.HTTP_TIMEOUT, http_auth=None, http_headers=None
        )

    def test_read_only(self):
        with self.assertRaises(AttributeError):
            self.device.control_url = "http://10.0.0.1/ctl/IPConn"
        with self.assertRaises(AttributeError):
            self.device.location = "10.0.0.1"

    def test_missing_control_url(self):
        self.assertRaises(igd.ValidationError, Device, "192.168.1.1", None)

    def test_repr(self):
        self.assertEqual(repr(self.device), "<Device '192.168.1.1:1780'>")

    @mock.patch("igdclient.igd.get_external_ip_address", return_value="203.0.113.5")
    def test_public_ip(self, mock_get):
        self.assertEqual(self.device.public_ip(), "203.0.113.5")
        mock_get.assert_called_with(TEST_CONTROL_URL, **self.soap_kwargs)

    @mock.patch("igdclient.igd.add_port_mapping")
    @mock.patch("igdclient.upnp.get_internal_ip", return_value="192.168.1.10")
    def test_forward(self, mock_ip, mock_add):
        self.device.forward(8080, "web")
        mock_ip.assert_called_with(("8.8.8.8", 80))
        mock_add.assert_called_with(
            "", "192.168.1.10", "TCP", "web", 8080, 8080, True, 0, TEST_CONTROL_URL,
            **self.soap_kwargs
        )

    @mock.patch("igdclient.igd.add_port_mapping")
    @mock.patch("igdclient.upnp.get_internal_ip")
    def test_forward_network_unavailable(self, mock_ip, mock_add):
        mock_ip.side_effect = igd.NetworkUnavailableError("no route")
        self.assertRaises(igd.NetworkUnavailableError, self.device.forward, 8080, "web")
        mock_add.assert_not_called()

    @mock.patch("igdclient.igd.delete_port_mapping")
    def test_close(self, mock_delete):
        self.device.close(8080)
        mock_delete.assert_called_with("", 8080, "TCP", TEST_CONTROL_URL, **self.soap_kwargs)

    @mock.patch("requests.post")
    @mock.patch("igdclient.upnp.get_internal_ip", return_value="192.168.1.10")
    def test_forward_port_out_of_range(self, mock_ip, mock_post):
        self.assertRaises(igd.ValidationError, self.device.forward, 70000, "web")
        mock_post.assert_not_called()

    @mock.patch("igdclient.igd.delete_port_mapping")
    def test_settings(self, mock_delete):
        device = Device(
            "192.168.1.1:1780", TEST_CONTROL_URL, namespace=WANIP, timeout=2,
            http_auth=("user", "pass"), http_headers={"X-Test": "1"},
        )
        device.close(8080)
        _, kwargs = mock_delete.call_args
        self.assertEqual(
            kwargs,
            dict(namespace=WANIP, timeout=2, http_auth=("user", "pass"),
                 http_headers={"X-Test": "1"}),
        )


class TestAsyncDevice(unittest.TestCase):
    def setUp(self):
        self.loop = asyncio.new_event_loop()
        self.session = mock.Mock()
        self.device = AsyncDevice("192.168.1.1:1780", TEST_CONTROL_URL, session=self.session)

    def tearDown(self):
        self.loop.close()

    @mock.patch("igdclient.igd.async_get_external_ip_address", new_callable=mock.AsyncMock)
    def test_public_ip(self, mock_get):
        mock_get.return_value = "203.0.113.5"
        self.assertEqual(self.loop.run_until_complete(self.device.public_ip()), "203.0.113.5")
        _, kwargs = mock_get.call_args
        self.assertIs(kwargs["session"], self.session)

    @mock.patch("igdclient.igd.async_add_port_mapping", new_callable=mock.AsyncMock)
    @mock.patch("igdclient.upnp.get_internal_ip", return_value="192.168.1.10")
    def test_forward(self, mock_ip, mock_add):
        self.loop.run_until_complete(self.device.forward(8080, "web"))
        args, _ = mock_add.call_args
        self.assertEqual(
            args, ("", "192.168.1.10", "TCP", "web", 8080, 8080, True, 0, TEST_CONTROL_URL)
        )

    @mock.patch("igdclient.igd.async_delete_port_mapping", new_callable=mock.AsyncMock)
    def test_close(self, mock_delete):
        self.loop.run_until_complete(self.device.close(8080))
        args, kwargs = mock_delete.call_args
        self.assertEqual(args, ("", 8080, "TCP", TEST_CONTROL_URL))
        self.assertIs(kwargs["session"], self.session)
