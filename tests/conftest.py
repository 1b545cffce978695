"""Pytest configuration and shared report samples for jailwatch."""
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from jailwatch.config import set_config


MONITOR_REPORT_BG = "\n".join([
    "==========================================",
    "🛡️  СИГУРНОСТЕН МОНИТОРИНГ - 2026-10-17 09:15:02",
    "==========================================",
    "Сървър: web01",
    "",
    "🔒 FAIL2BAN СТАТИСТИКИ",
    "Status",
    "|- Number of jail:\t3",
    "`- Jail list:\tsshd, nginx-404, nginx-admin-scanners",
    "",
    "🚫 БЛОКИРАНИ IP АДРЕСИ",
    "sshd (2 блокирани)",
    "    203.0.113.5",
    "    198.51.100.23",
    "nginx-404 (1 блокирани)",
    "    192.0.2.44",
    "Общо блокирани IP адреси: 3",
    "",
    "📊 NGINX СТАТИСТИКИ",
    "Общо заявки днес: 15234",
    "Топ 5 IP адреси:",
    "    812 203.0.113.5",
    "    401 198.51.100.23",
    "Скрити файлове (.env, .git): 17",
    "WebDAV атаки: 4",
    "Admin скенери: 9",
    '203.0.113.5 - - [17/Oct/2026:09:01:12 +0000] "GET /wp-admin HTTP/1.1" 404 162',
    "404 грешки:",
    "  231",
    "Роботи (robots.txt): 12",
    "",
    "💾 СИСТЕМНИ РЕСУРСИ",
    "              total        used        free      shared  buff/cache   available",
    "Mem:           7.7Gi       2.1Gi       3.0Gi       120Mi       2.6Gi       5.2Gi",
    "Filesystem      Size  Used Avail Use% Mounted on",
    "/dev/sda1        50G   21G   27G  44% /",
    " 09:15:02 up 12 days,  3:04,  1 user,  load average: 0.15, 0.10, 0.05",
    "",
])

MONITOR_REPORT_EN = "\n".join([
    "SECURITY MONITORING - 2026-10-17 09:15:02",
    "Server: web02",
    "",
    "FAIL2BAN STATISTICS",
    "Status: active",
    "Jail list:",
    "  sshd, recidive",
    "",
    "BANNED IPS",
    "sshd (1 banned)",
    "  203.0.113.9",
    "Total banned: 1",
    "",
    "NGINX STATISTICS",
    "Total requests: 800",
    "404 errors: 12",
    "Admin scans: 3",
    "",
])

FAIL2BAN_DOWN_REPORT = "\n".join([
    "🛡️  СИГУРНОСТЕН МОНИТОРИНГ - 2026-10-17 09:15:02",
    "🔒 FAIL2BAN СТАТИСТИКИ",
    "ERROR   Failed to access socket path: /var/run/fail2ban/fail2ban.sock. Is fail2ban running?",
    "💾 СИСТЕМНИ РЕСУРСИ",
    " 09:15:02 up 1 day,  2:00,  1 user,  load average: 0.01, 0.02, 0.03",
    "",
])

FAIL2BAN_DOWN_WITH_NGINX_REPORT = "\n".join([
    "🔒 FAIL2BAN СТАТИСТИКИ",
    "ERROR   Failed to access socket path: /var/run/fail2ban/fail2ban.sock. Is fail2ban running?",
    "📊 NGINX СТАТИСТИКИ",
    "Общо заявки днес: 500",
    "404 грешки: 40",
    "",
])

GLOBAL_STATUS = "\n".join([
    "Status",
    "|- Number of jail:\t2",
    "`- Jail list:\tnginx-404, nginx-admin-scanners",
])

JAIL_STATUS_SSHD = "\n".join([
    "Status for the jail: sshd",
    "|- Filter",
    "|  |- Currently failed:\t1",
    "|  |- Total failed:\t15",
    "|  `- File list:\t/var/log/auth.log",
    "`- Actions",
    "   |- Currently banned:\t2",
    "   |- Total banned:\t7",
    "   `- Banned IP list:\t203.0.113.5 198.51.100.23",
])

JAIL_CONFIG_ONLY = "\n".join([
    "filter = sshd",
    "maxretry = 5",
    "bantime = 600",
    "findtime = 300",
])

QUICK_CHECK_BG = "\n".join([
    "🔍 БЪРЗА ПРОВЕРКА",
    "Време: 2026-10-17 09:20:00",
    "Fail2ban jails:",
    "  sshd, nginx-404",
    "Блокирани IP: 5",
    "Последни атаки:",
    "  14",
    "Грешки: 0",
    "✅ Проверката завърши",
])

NGINX_STATS = "\n".join([
    "404_count:231",
    "admin_scans:9",
    "webdav_attacks:4",
    "hidden_files_attempts:17",
    "robots_scans:12",
    "total_requests:15234",
])

SYSTEM_INFO = "\n".join([
    "hostname:web01",
    "uptime:up 5 days, 3 hours",
    "memory:2.1G/7.7G (27%)",
    "disk:20G/50G (42%)",
    "load:0.15, 0.10, 0.05",
])

BACKUP_OK = "\n".join([
    "📦 Създаване на бекъп на fail2ban конфигурация...",
    "✅ Бекъпът е създаден успешно",
    "Файл: /home/admin/fail2ban-backups/fail2ban-config-20261017_091500.tar.gz",
    "Размер: 12K",
])

FAIL2BAN_LOG = "\n".join([
    "2026-10-17 08:00:01,101 fail2ban.server         [812]: INFO    Starting Fail2ban v1.0.2",
    "2026-10-17 08:00:02,310 fail2ban.actions        [812]: NOTICE  [sshd] Restore Ban 198.51.100.23",
    "2026-10-17 08:41:10,004 fail2ban.filter         [812]: INFO    [sshd] Found 203.0.113.5 - 2026-10-17 08:41:09",
    "2026-10-17 08:41:12,550 fail2ban.actions        [812]: NOTICE  [sshd] Ban 203.0.113.5",
    "2026-10-17 08:52:40,120 fail2ban.actions        [812]: NOTICE  [nginx-404] Ban 192.0.2.77",
    "2026-10-17 09:01:12,551 fail2ban.actions        [812]: NOTICE  [sshd] Unban 203.0.113.5",
    "2026-10-17 09:05:30,900 fail2ban.actions        [812]: NOTICE  [sshd] Ban 203.0.113.5",
])


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the default configuration."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def monitor_report_bg():
    return MONITOR_REPORT_BG


@pytest.fixture
def monitor_report_en():
    return MONITOR_REPORT_EN


@pytest.fixture
def fail2ban_down_report():
    return FAIL2BAN_DOWN_REPORT


@pytest.fixture
def fail2ban_down_with_nginx_report():
    return FAIL2BAN_DOWN_WITH_NGINX_REPORT


@pytest.fixture
def global_status():
    return GLOBAL_STATUS


@pytest.fixture
def jail_status_sshd():
    return JAIL_STATUS_SSHD


@pytest.fixture
def jail_config_only():
    return JAIL_CONFIG_ONLY


@pytest.fixture
def quick_check_bg():
    return QUICK_CHECK_BG


@pytest.fixture
def fail2ban_log():
    return FAIL2BAN_LOG


@pytest.fixture
def nginx_stats():
    return NGINX_STATS


@pytest.fixture
def system_info():
    return SYSTEM_INFO


@pytest.fixture
def backup_ok():
    return BACKUP_OK
