# jailwatch/classify.py
# Jail category and severity inference from the jail name.

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class JailCategory(str, Enum):
    SSH = "ssh"
    NGINX = "nginx"
    HTTP = "http"
    SYSTEM = "system"
    OTHER = "other"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


HIGH_THRESHOLDS: Dict[JailCategory, int] = {
    JailCategory.SSH: 20,
    JailCategory.NGINX: 30,
    JailCategory.HTTP: 30,
    JailCategory.SYSTEM: 15,
    JailCategory.OTHER: 20,
}

MEDIUM_THRESHOLDS: Dict[JailCategory, int] = {
    JailCategory.SSH: 5,
    JailCategory.NGINX: 10,
    JailCategory.HTTP: 10,
    JailCategory.SYSTEM: 3,
    JailCategory.OTHER: 5,
}

SYSTEM_PREFIXES = ("postfix", "dovecot", "recidive", "pam-")


def infer_category(jail_name: Optional[str]) -> str:
    if not jail_name or not isinstance(jail_name, str):
        return JailCategory.OTHER.value

    name = jail_name.lower()
    if "ssh" in name:
        return JailCategory.SSH.value
    if "nginx" in name:
        return JailCategory.NGINX.value
    if name.startswith("apache") or "http" in name:
        return JailCategory.HTTP.value
    if name.startswith(SYSTEM_PREFIXES) or "system" in name:
        return JailCategory.SYSTEM.value
    return JailCategory.OTHER.value


def infer_severity(jail_name: Optional[str], banned_count: int) -> str:
    category = JailCategory(infer_category(jail_name))
    if banned_count >= HIGH_THRESHOLDS[category]:
        return Severity.HIGH.value
    if banned_count >= MEDIUM_THRESHOLDS[category]:
        return Severity.MEDIUM.value
    return Severity.LOW.value
