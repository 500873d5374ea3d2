"""
Diagnostic token catalog: readiness scores, colors and messages
"""

from typing import NamedTuple, Optional


GREEN = "GREEN"
RED = "RED"
BLUE = "BLUE"
ORANGE = "ORANGE"
YELLOW = "YELLOW"  # unknown / caution

SCORE_MAX = 10
SCORE_NA = -1


class TokenEntry(NamedTuple):
    transition: int  # dual-stack (IPv4 + IPv6) readiness
    strict: int      # IPv6-only readiness
    color: str
    message: str
    more_info: Optional[str] = None


TOKEN_TABLE: dict[str, TokenEntry] = {
    "6to4": TokenEntry(
        7, 7, BLUE,
        "You appear to be using a public 6to4 gateway; performance may suffer. "
        "Native IPv6 is preferred.",
        "faq_6to4.html"),
    "teredo": TokenEntry(
        7, 7, BLUE,
        "Your IPv6 connection appears to be using Teredo, a public IPv4/IPv6 "
        "gateway; quality may suffer."),
    "teredo-v4pref": TokenEntry(
        10, 7, BLUE,
        "Your IPv6 connection uses Teredo as a last resort; IPv4 will be "
        "preferred on dual-stack sites."),
    "teredo-minimum": TokenEntry(
        10, 0, BLUE,
        "Your IPv6 connection uses Teredo and only works to literal IPs; not "
        "useful for browsing IPv6 sites.",
        "faq_teredo_minimum.html"),
    "IPv6 MTU": TokenEntry(
        1, 1, RED,
        "IPv6 works but large packets fail; check MTU and allow ICMPv6 Packet Too Big."),
    "dualstack:ipv4_preferred": TokenEntry(
        10, 10, GREEN, "Dual-stack reachable; browser prefers IPv4."),
    "dualstack:ipv6_preferred": TokenEntry(
        10, 10, GREEN, "Dual-stack reachable; browser prefers IPv6."),
    "dualstack:slow": TokenEntry(
        7, 7, BLUE,
        "Dual-stack reachable but browser slows down when both families are offered."),
    "ipv4_only": TokenEntry(
        10, 0, BLUE,
        "You appear to be able to browse the IPv4 Internet only. You will not be "
        "able to reach IPv6-only sites."),
    "ipv4_only:ds_good": TokenEntry(
        10, 0, BLUE,
        "When a publisher offers both IPv4 and IPv6, your browser takes IPv4 "
        "without delay."),
    "ipv4_only:ds_slow": TokenEntry(
        5, 0, RED,
        "When a publisher offers both IPv4 and IPv6, your browser is slower than "
        "IPv4-only sites."),
    "ipv4_only:ds_timeout": TokenEntry(
        5, 0, RED,
        "When a publisher offers both IPv4 and IPv6, your browser times out "
        "trying to connect."),
    "ipv4_slow": TokenEntry(
        5, 10, RED, "Connections to IPv4 are slow, but functional."),
    "ipv6_only": TokenEntry(
        0, 10, BLUE,
        "You appear to be able to browse the IPv6 Internet only. You have no "
        "access to IPv4."),
    "ipv6_slow": TokenEntry(
        10, 5, RED, "Connections to IPv6 are slow, but functional."),
    "ipv6_timeout": TokenEntry(
        10, 0, RED, "Connections to IPv6-only sites are timing out."),
    "ipv6:nodns": TokenEntry(
        10, 0, RED,
        "IPv6 connections work, but DNS lookups do not use IPv6 (no AAAA).",
        "faq_broken_aaaa.html"),
    "broken_ipv6": TokenEntry(
        0, 0, RED,
        "You appear to have IPv6 configured, but it completely fails for IPv6 sites."),
    "webfilter:blocked": TokenEntry(
        -1, -1, ORANGE,
        "Tests appear blocked by a firewall or browser filter; critical tests failed.",
        "faq_browser_plugins.html"),
    "webfilter:dsboth": TokenEntry(
        10, 10, ORANGE,
        "Dual-stack tests appear blocked by a browser or network filter.",
        "faq_browser_plugins.html"),
    "webfilter:addons": TokenEntry(
        10, 10, ORANGE,
        "Browser blocked test URLs; alternate methods may be incomplete.",
        "faq_browser_plugins.html"),
    "webfilter:firefox": TokenEntry(
        10, 10, ORANGE,
        "Likely a Firefox add-on (e.g., NoScript/AdBlock) blocked tests.",
        "faq_firefox_plugins.html"),
    "v6ns:ok": TokenEntry(
        10, 10, GREEN, "Your DNS server appears to have IPv6 Internet access."),
    "v6ns:bad": TokenEntry(
        10, 9, BLUE,
        "Your DNS server appears to have no IPv6 Internet access or is not "
        "configured to use it.",
        "faq_v6ns_bad.html"),
    "ip_timeout:firefox": TokenEntry(
        10, 10, RED,
        "Firefox add-on likely caused IP-based tests to fail.",
        "faq_firefox_plugins.html"),
    "ipv4:no_address": TokenEntry(
        10, 10, BLUE, "No IPv4 address detected."),
    "ipv6:no_address": TokenEntry(
        10, 10, RED, "No IPv6 address detected.", "faq_no_ipv6.html"),
    "no_address": TokenEntry(
        10, 10, RED,
        "IP addresses could not be detected due to interference from browser add-ons."),
    "dualstack:safe": TokenEntry(
        10, 10, GREEN,
        "Good news! Your current configuration will continue to work as sites "
        "enable IPv6."),
    "needs_ipv6": TokenEntry(
        10, 10, BLUE,
        "To ensure the best Internet performance and connectivity, ask your ISP "
        "about native IPv6.",
        "faq_no_ipv6.html"),
    "dualstack:unsafe": TokenEntry(
        10, 10, RED,
        "Our tests show dual-stack readiness is unsafe; IPv6 may cause problems."),
    "dualstack:mtu": TokenEntry(
        10, 10, RED, "MTU issues detected; IPv6-only sites may fail or load slowly."),
    "proxy_via": TokenEntry(
        10, 10, ORANGE, "A proxy was detected; tests reflect the proxy, not the local host."),
    "proxy_via_dumb": TokenEntry(
        10, 10, ORANGE, "A proxy was detected; tests reflect the proxy, not the local host."),
    "broken": TokenEntry(
        0, 0, BLUE, "We have suggestions to help you fix your system."),
    "avoids_ipv6": TokenEntry(
        10, 10, ORANGE,
        "Browser has working IPv6 but is avoiding using it; this is concerning.",
        "faq_avoids_ipv6.html"),
}


def unknown_entry(token: str) -> TokenEntry:
    """Neutral entry for tokens missing from the table"""
    return TokenEntry(SCORE_MAX, SCORE_MAX, YELLOW, f"(unknown result code: {token})")
