import socket
from collections import namedtuple

import psutil

from machine_report import collectors
from machine_report.collectors import (
    LOCAL_SESSION,
    NEVER_LOGGED_IN,
    NO_IP,
    NOT_CONNECTED,
    MachineCollector,
    MachineFacts,
    collect_facts,
    format_uptime,
    parse_client_ip,
    parse_last_login,
)

Addr = namedtuple("Addr", "family address netmask broadcast ptp")
Freq = namedtuple("Freq", "current min max")


def test_format_uptime():
    assert format_uptime(59) == "0m"
    assert format_uptime(3 * 3600 + 120) == "3h 2m"
    assert format_uptime(2 * 86400 + 5 * 3600 + 7 * 60) == "2d 5h 7m"


def test_parse_last_login_with_ip():
    out = "deploy   pts/0        192.168.1.20     Mon Oct 19 14:17   still logged in\n\nwtmp begins Thu Oct  1"
    assert parse_last_login(out) == ("Mon Oct 19 14:17", "192.168.1.20")


def test_parse_last_login_without_ip():
    out = "deploy   console  Mon Oct 19 09:02   still logged in"
    assert parse_last_login(out) == ("Mon Oct 19 09:02", "")


def test_parse_last_login_never():
    assert parse_last_login("") == (NEVER_LOGGED_IN, "")
    assert parse_last_login("\nwtmp begins Thu Oct  1 00:00:00 2026") == (NEVER_LOGGED_IN, "")
    assert parse_last_login("deploy has never logged in") == (NEVER_LOGGED_IN, "")


def test_parse_last_login_short_line_is_kept():
    assert parse_last_login("deploy tty1") == ("deploy tty1", "")


def test_parse_client_ip():
    assert parse_client_ip("") == NOT_CONNECTED
    assert parse_client_ip("deploy pts/0 2026-10-19 14:17 (10.1.2.3)") == "10.1.2.3"
    assert parse_client_ip("deploy console 2026-10-19 09:02") == LOCAL_SESSION


def test_client_ip_prefers_ssh_client(monkeypatch):
    monkeypatch.setenv("SSH_CLIENT", "203.0.113.9 51234 22")
    assert MachineCollector("Linux").get_client_ip() == {"client_ip": "203.0.113.9"}


def test_machine_ip_skips_loopback_and_docker(monkeypatch):
    addrs = {
        "lo": [Addr(socket.AF_INET, "127.0.0.1", None, None, None)],
        "docker0": [Addr(socket.AF_INET, "172.17.0.1", None, None, None)],
        "eth0": [
            Addr(socket.AF_INET6, "fe80::1", None, None, None),
            Addr(socket.AF_INET, "10.0.0.12", None, None, None),
        ],
    }
    monkeypatch.setattr(psutil, "net_if_addrs", lambda: addrs)
    assert MachineCollector("Linux").get_machine_ip() == {"machine_ip": "10.0.0.12"}


def test_machine_ip_sentinel(monkeypatch):
    monkeypatch.setattr(psutil, "net_if_addrs", lambda: {"lo": [Addr(socket.AF_INET, "127.0.0.1", None, None, None)]})
    assert MachineCollector("Linux").get_machine_ip() == {"machine_ip": NO_IP}


def test_dns_from_resolv_conf(monkeypatch):
    resolv = "# generated\nsearch lan\nnameserver 1.1.1.1\nnameserver 8.8.8.8\nnameserver 9.9.9.9\nnameserver 8.8.4.4"
    monkeypatch.setattr(collectors, "_read", lambda path: resolv)
    assert MachineCollector("Linux").get_dns_servers() == {"dns": ("1.1.1.1", "8.8.8.8", "9.9.9.9")}


def test_dns_from_scutil(monkeypatch):
    out = "resolver #1\n  nameserver[0] : 192.168.1.1\nresolver #2\n  nameserver[0] : 10.0.0.1\n"
    monkeypatch.setattr(collectors, "_cmd", lambda *args, **kw: out)
    assert MachineCollector("Darwin").get_dns_servers() == {"dns": ("192.168.1.1", "10.0.0.1")}


def test_os_info_from_os_release(monkeypatch):
    monkeypatch.setattr(collectors, "_read", lambda path: 'NAME="Ubuntu"\nPRETTY_NAME="Ubuntu 24.04 LTS"\n')
    assert MachineCollector("Linux").get_os_info()["os_name"] == "Ubuntu 24.04 LTS"


def test_cpu_info_linux(monkeypatch):
    lscpu = (
        "Architecture:            x86_64\n"
        "Model name:              AMD EPYC 7763 64-Core Processor\n"
        "Socket(s):               2\n"
        "Hypervisor vendor:       KVM\n"
    )
    monkeypatch.setattr(collectors, "_cmd", lambda *args, **kw: lscpu)
    monkeypatch.setattr(psutil, "cpu_count", lambda logical=True: 16 if logical else 8)
    monkeypatch.setattr(psutil, "cpu_freq", lambda: Freq(2450.0, 1500.0, 3500.0))
    monkeypatch.setattr(psutil, "getloadavg", lambda: (1.5, 1.0, 0.5))

    info = MachineCollector("Linux").get_cpu_info()
    assert info["cpu_model"] == "AMD EPYC 7763 64-Core Processor"
    assert info["sockets"] == 2
    assert info["hypervisor"] == "KVM"
    assert info["cores_physical"] == 8
    assert info["cores_logical"] == 16
    assert info["freq_ghz"] == 3.5
    assert (info["load_1"], info["load_5"], info["load_15"]) == (1.5, 1.0, 0.5)


def test_cmd_returns_empty_on_missing_binary():
    assert collectors._cmd("definitely-not-a-real-command-xyz") == ""


class FakeCollector:
    def tasks(self):
        def boom():
            raise RuntimeError("collector exploded")

        return [
            ("hostname", lambda: {"hostname": "box"}),
            ("cpu", lambda: {"cores_logical": 4, "load_1": 1.0, "unrelated": "ignored"}),
            ("memory", boom),
        ]


def test_collect_facts_joins_and_survives_failures():
    facts = collect_facts(FakeCollector())
    assert facts.hostname == "box"
    assert facts.cores_logical == 4
    assert facts.load_1 == 1.0
    assert facts.mem_percent is None
    assert facts.os_name == MachineFacts().os_name


def test_cmd_tolerates_invalid_utf8():
    assert collectors._cmd("printf", "\\377abc") == "\ufffdabc"


def test_os_info_survives_latin1_os_release(monkeypatch, tmp_path):
    os_release = tmp_path / "os-release"
    os_release.write_bytes(b'NAME="Cafe"\nPRETTY_NAME="Caf\xe9 Linux"\n')
    monkeypatch.setattr(collectors, "OS_RELEASE", str(os_release))
    info = MachineCollector("Linux").get_os_info()
    assert info["os_name"] == "Caf\ufffd Linux"
    assert info["kernel"] != ""
