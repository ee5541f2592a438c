"""Turns collected machine facts into the ordered report sections."""

from machine_report.config import NOT_AVAILABLE
from machine_report.layout import Field

GIB = 1024 ** 3


def format_gib(n):
    return f"{n / GIB:.2f}"


def usage_string(used, total, percent, unit):
    """``"12.34/31.99 GiB [38.58%]"``, or N/A when a figure is missing."""
    if used is None or total is None or percent is None:
        return NOT_AVAILABLE
    return f"{format_gib(used)}/{format_gib(total)} {unit} [{percent:.2f}%]"


def load_percent(load, cores):
    """Load average as a share of the logical cores; may exceed 100."""
    if load is None or not cores:
        return 0.0
    return load / cores * 100.0


def build_sections(facts):
    """Ordered sections: OS, network, CPU, disk, memory, login."""
    cores = facts.cores_logical

    os_section = (
        Field.text("OS", facts.os_name),
        Field.text("KERNEL", facts.kernel),
    )

    net = [
        Field.text("HOSTNAME", facts.hostname),
        Field.text("MACHINE IP", facts.machine_ip),
        Field.text("CLIENT  IP", facts.client_ip),
    ]
    for i, server in enumerate(facts.dns, start=1):
        net.append(Field.text(f"DNS  IP {i}", server))
    net.append(Field.text("USER", facts.user))

    if facts.load_1 is None or not cores:
        cpu_usage = NOT_AVAILABLE
    else:
        cpu_usage = f"{load_percent(facts.load_1, cores):.2f}%"
    cpu_section = (
        Field.text("PROCESSOR", facts.cpu_model),
        Field.text("CORES", f"{facts.cores_physical} vCPU(s) / {facts.sockets} Socket(s)"),
        Field.text("FREQUENCY", f"{facts.freq_ghz:.2f} GHz" if facts.freq_ghz else NOT_AVAILABLE),
        Field.text("HYPERVISOR", facts.hypervisor),
        Field.text("CPU USAGE", cpu_usage),
        Field.bar("LOAD  1m", load_percent(facts.load_1, cores)),
        Field.bar("LOAD  5m", load_percent(facts.load_5, cores)),
        Field.bar("LOAD 15m", load_percent(facts.load_15, cores)),
    )

    disk_section = (
        Field.text("VOLUME", usage_string(facts.disk_used, facts.disk_total, facts.disk_percent, "GB")),
        Field.bar("DISK USAGE", facts.disk_percent or 0.0),
    )

    mem_section = (
        Field.text("MEMORY", usage_string(facts.mem_used, facts.mem_total, facts.mem_percent, "GiB")),
        Field.bar("USAGE", facts.mem_percent or 0.0),
    )

    login = [Field.text("LAST LOGIN", facts.last_login)]
    if facts.login_ip:
        login.append(Field.text("", facts.login_ip))
    login.append(Field.text("UPTIME", facts.uptime))

    return [os_section, tuple(net), cpu_section, disk_section, mem_section, tuple(login)]
