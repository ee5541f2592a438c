"""Machine fact collectors.

Each collector is an independent query (psutil, platform, a file under /etc,
or a short-lived subprocess) that returns a dict of facts. Failures are
logged and answered with sentinel strings; a collector never takes the
report down with it.
"""

import getpass
import logging
import os
import platform
import re
import socket
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, fields
from typing import Optional, Tuple

import psutil

from machine_report.config import NOT_AVAILABLE, UNKNOWN

logger = logging.getLogger(__name__)

NO_IP = "No IP found"
NOT_DEFINED = "Not Defined"
NOT_CONNECTED = "Not connected"
LOCAL_SESSION = "Local Session"
NEVER_LOGGED_IN = "Never logged in"
BARE_METAL = "Bare Metal"

SKIPPED_INTERFACES = ("lo", "doc")
MAX_DNS_SERVERS = 3

OS_RELEASE = "/etc/os-release"


@dataclass(frozen=True)
class MachineFacts:
    os_name: str = UNKNOWN
    kernel: str = UNKNOWN
    hostname: str = NOT_DEFINED
    machine_ip: str = NO_IP
    client_ip: str = NOT_CONNECTED
    dns: Tuple[str, ...] = ()
    user: str = UNKNOWN
    cpu_model: str = UNKNOWN
    cores_physical: int = 0
    cores_logical: int = 0
    sockets: int = 0
    freq_ghz: float = 0.0
    load_1: Optional[float] = None
    load_5: Optional[float] = None
    load_15: Optional[float] = None
    hypervisor: str = BARE_METAL
    mem_used: Optional[int] = None
    mem_total: Optional[int] = None
    mem_percent: Optional[float] = None
    disk_used: Optional[int] = None
    disk_total: Optional[int] = None
    disk_percent: Optional[float] = None
    last_login: str = NEVER_LOGGED_IN
    login_ip: str = ""
    uptime: str = NOT_AVAILABLE


# ── Helpers ──────────────────────────────────────────────────────────

def _read(path):
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read().strip()
    except OSError as e:
        logger.debug("cannot read %s: %s", path, e)
        return None


def _cmd(*args, timeout=2):
    try:
        r = subprocess.run(args, capture_output=True, text=True,
                           encoding="utf-8", errors="replace", timeout=timeout)
        return r.stdout.strip()
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("command %s failed: %s", " ".join(args), e)
        return ''


def _field(text, key):
    """Value of a ``Key: value`` line in tool output such as lscpu."""
    m = re.search(rf'^\s*{re.escape(key)}\s*:\s*(.+)$', text or '', re.MULTILINE)
    return m.group(1).strip() if m else None


def format_uptime(seconds):
    d, rem = divmod(int(seconds), 86400)
    h, rem = divmod(rem, 3600)
    m = rem // 60
    if d > 0:
        return f"{d}d {h}h {m}m"
    elif h > 0:
        return f"{h}h {m}m"
    return f"{m}m"


def parse_last_login(output):
    """(time, ip) from the first record of ``last -1 <user>``."""
    line = next((ln for ln in (output or '').splitlines() if ln.strip()), '')
    if not line or 'never logged in' in line or line.startswith(('wtmp', 'btmp')):
        return NEVER_LOGGED_IN, ''

    parts = line.split()
    ip = ''
    start = 2
    if len(parts) > 2 and parts[2][0].isdigit() and '.' in parts[2]:
        ip = parts[2]
        start = 3
    if len(parts) >= start + 4:
        return " ".join(parts[start:start + 4]), ip
    return line.strip(), ip


def parse_client_ip(who_output):
    if not who_output:
        return NOT_CONNECTED
    m = re.search(r'\(([^)]*)\)', who_output)
    if m:
        return m.group(1)
    return LOCAL_SESSION


# ── Collectors ───────────────────────────────────────────────────────

class MachineCollector:
    """Queries the local machine; one method per independent fact group."""

    def __init__(self, system=None):
        self.system = system or platform.system()

    def tasks(self):
        return [
            ('os', self.get_os_info),
            ('hostname', self.get_hostname),
            ('machine_ip', self.get_machine_ip),
            ('client_ip', self.get_client_ip),
            ('dns', self.get_dns_servers),
            ('user', self.get_current_user),
            ('cpu', self.get_cpu_info),
            ('memory', self.get_memory_info),
            ('disk', self.get_disk_info),
            ('login', self.get_login_info),
        ]

    def get_os_info(self):
        os_name = None
        if self.system == 'Darwin':
            name = _cmd('sw_vers', '-productName')
            version = _cmd('sw_vers', '-productVersion')
            os_name = f"{name} {version}".strip()
        else:
            for line in (_read(OS_RELEASE) or '').split('\n'):
                if line.startswith('PRETTY_NAME'):
                    os_name = line.split('=', 1)[1].strip().strip('"')
                    break
        if not os_name:
            os_name = f"{platform.system()} {platform.release()}".strip()
        kernel = f"{platform.system()} {platform.release()}".strip()
        return {'os_name': os_name or UNKNOWN, 'kernel': kernel or UNKNOWN}

    def get_hostname(self):
        try:
            return {'hostname': socket.gethostname() or NOT_DEFINED}
        except OSError:
            return {'hostname': NOT_DEFINED}

    def get_machine_ip(self):
        try:
            addrs = psutil.net_if_addrs()
        except (OSError, psutil.Error) as e:
            logger.debug("net_if_addrs failed: %s", e)
            return {'machine_ip': NO_IP}
        for iface, entries in addrs.items():
            if iface.startswith(SKIPPED_INTERFACES):
                continue
            for entry in entries:
                if entry.family == socket.AF_INET and not entry.address.startswith('127.'):
                    return {'machine_ip': entry.address}
        return {'machine_ip': NO_IP}

    def get_client_ip(self):
        ssh_client = os.environ.get('SSH_CLIENT')
        if ssh_client and ssh_client.split():
            return {'client_ip': ssh_client.split()[0]}
        return {'client_ip': parse_client_ip(_cmd('who', 'am', 'i'))}

    def get_dns_servers(self):
        servers = []
        if self.system == 'Darwin':
            out = _cmd('scutil', '--dns')
            servers = re.findall(r'nameserver\[0\]\s*:\s*([0-9a-fA-F.:]+)', out)
        else:
            for line in (_read('/etc/resolv.conf') or '').split('\n'):
                parts = line.split()
                if len(parts) >= 2 and parts[0] == 'nameserver':
                    servers.append(parts[1])
        return {'dns': tuple(servers[:MAX_DNS_SERVERS])}

    def get_current_user(self):
        user = os.environ.get('USER')
        if not user:
            try:
                user = getpass.getuser()
            except (OSError, KeyError, ImportError):
                user = None
        return {'user': user or UNKNOWN}

    def get_cpu_info(self):
        info = {}
        if self.system == 'Darwin':
            info['cpu_model'] = _cmd('sysctl', '-n', 'machdep.cpu.brand_string') or None
            packages = _cmd('sysctl', '-n', 'hw.packages')
            info['sockets'] = int(packages) if packages.isdigit() else 1
        else:
            lscpu = _cmd('lscpu')
            model = _field(lscpu, 'Model name')
            if not model:
                model = _field(_read('/proc/cpuinfo'), 'model name')
            info['cpu_model'] = model
            sockets = _field(lscpu, 'Socket(s)')
            info['sockets'] = int(sockets) if sockets and sockets.isdigit() else 1
            hypervisor = _field(lscpu, 'Hypervisor vendor')
            if hypervisor:
                info['hypervisor'] = hypervisor
        if not info['cpu_model']:
            info['cpu_model'] = platform.processor() or UNKNOWN

        info['cores_physical'] = psutil.cpu_count(logical=False) or 0
        info['cores_logical'] = psutil.cpu_count() or 0
        try:
            freq = psutil.cpu_freq()
        except (OSError, NotImplementedError, psutil.Error):
            freq = None
        if freq:
            info['freq_ghz'] = (freq.max or freq.current) / 1000.0
        try:
            info['load_1'], info['load_5'], info['load_15'] = psutil.getloadavg()
        except (OSError, psutil.Error) as e:
            logger.debug("getloadavg failed: %s", e)
        return info

    def get_memory_info(self):
        mem = psutil.virtual_memory()
        return {
            'mem_used': mem.used,
            'mem_total': mem.total,
            'mem_percent': mem.percent,
        }

    def get_disk_info(self):
        disk = psutil.disk_usage('/')
        return {
            'disk_used': disk.used,
            'disk_total': disk.total,
            'disk_percent': disk.percent,
        }

    def get_login_info(self):
        user = self.get_current_user()['user']
        last_login, login_ip = parse_last_login(_cmd('last', '-1', user))
        try:
            uptime = format_uptime(time.time() - psutil.boot_time())
        except (OSError, psutil.Error):
            uptime = NOT_AVAILABLE
        return {'last_login': last_login, 'login_ip': login_ip, 'uptime': uptime}


def collect_facts(collector=None, max_workers=4):
    """Run every collector concurrently and join them into MachineFacts."""
    collector = collector or MachineCollector()
    known = {f.name for f in fields(MachineFacts)}
    facts = {}
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(fn): name for name, fn in collector.tasks()}
        for future in as_completed(futures):
            name = futures[future]
            try:
                result = future.result()
            except Exception as e:
                logger.warning("collector %s failed: %s", name, e)
                logger.debug("collector %s traceback", name, exc_info=True)
                continue
            facts.update({k: v for k, v in result.items() if k in known and v is not None})
    return MachineFacts(**facts)
