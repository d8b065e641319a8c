import unittest

from idbscan.scanners.internetdb.client import LookupResult
from idbscan.scanners.internetdb.filters import (
    InvalidPortFilterError,
    filter_ports,
    parse_port_filter,
    parse_port_token,
)


RESULT = LookupResult(ip="192.0.2.5", hostnames=("host.example.com",), ports=(22, 80, 443))


class TestFilterPorts(unittest.TestCase):
    """Test turning lookup results into match lines."""

    def test_no_filter_reports_every_port_in_order(self):
        self.assertEqual(
            filter_ports(RESULT, ()),
            ["192.0.2.5:22", "192.0.2.5:80", "192.0.2.5:443"],
        )

    def test_filter_keeps_only_listed_ports(self):
        ports = parse_port_filter("80, 8080")
        self.assertEqual(filter_ports(RESULT, ports), ["192.0.2.5:80"])

    def test_filter_order_follows_tokens(self):
        ports = parse_port_filter("443,22")
        self.assertEqual(filter_ports(RESULT, ports), ["192.0.2.5:443", "192.0.2.5:22"])

    def test_token_is_reported_as_given(self):
        ports = parse_port_filter(" +80 ,0443")
        self.assertEqual(filter_ports(RESULT, ports), ["192.0.2.5:+80", "192.0.2.5:0443"])

    def test_repeated_tokens_are_not_deduplicated(self):
        ports = parse_port_filter("80,80")
        self.assertEqual(filter_ports(RESULT, ports), ["192.0.2.5:80", "192.0.2.5:80"])

    def test_unparsable_token_matches_port_zero_only(self):
        ports = parse_port_filter("http")
        self.assertEqual(filter_ports(RESULT, ports), [])

        with_zero = LookupResult(ip="192.0.2.6", hostnames=(), ports=(0, 80))
        self.assertEqual(filter_ports(with_zero, ports), ["192.0.2.6:http"])

    def test_no_ports_found(self):
        empty = LookupResult(ip="192.0.2.7", hostnames=(), ports=())
        self.assertEqual(filter_ports(empty, ()), [])
        self.assertEqual(filter_ports(empty, ("80",)), [])


class TestParsePortFilter(unittest.TestCase):
    """Test splitting the port filter string."""

    def test_empty_filter(self):
        self.assertEqual(parse_port_filter(""), ())
        self.assertEqual(parse_port_filter(None), ())

    def test_tokens_are_split_but_not_trimmed(self):
        self.assertEqual(parse_port_filter("80, 443"), ("80", " 443"))

    def test_strict_mode_rejects_bad_tokens(self):
        with self.assertRaises(InvalidPortFilterError):
            parse_port_filter("80,http", strict=True)
        with self.assertRaises(InvalidPortFilterError):
            parse_port_filter("80,", strict=True)

    def test_strict_mode_accepts_integers(self):
        self.assertEqual(parse_port_filter("80, 443", strict=True), ("80", " 443"))

    def test_parse_port_token(self):
        self.assertEqual(parse_port_token("80"), 80)
        self.assertEqual(parse_port_token("+80"), 80)
        self.assertEqual(parse_port_token("-1"), -1)
        self.assertEqual(parse_port_token("eighty"), 0)
        self.assertEqual(parse_port_token(""), 0)
        self.assertEqual(parse_port_token("8_0"), 0)


if __name__ == "__main__":
    unittest.main()
